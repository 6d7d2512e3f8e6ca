"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class KubernetesConfig:
    """How cluster identifiers are turned into API connections.

    With ``rancher_url`` set, every cluster id is reached through the
    Rancher cluster proxy. Otherwise ``in_cluster`` selects the pod's
    service account, and failing that cluster ids name kubeconfig contexts.
    """

    kubeconfig: str = ""
    in_cluster: bool = False
    rancher_url: str = ""
    rancher_token: str = ""
    rancher_insecure: bool = False


@dataclass
class ResolverConfig:
    """Graph resolution configuration."""

    fetch_timeout_seconds: int = 10


@dataclass
class MCPConfig:
    """MCP stdio server configuration."""

    enabled: bool = True


@dataclass
class APIConfig:
    """REST API configuration."""

    enabled: bool = False
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeDepConfig:
    """Top-level kubedep configuration."""

    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    mcp: MCPConfig = field(default_factory=MCPConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
