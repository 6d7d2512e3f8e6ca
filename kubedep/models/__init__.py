"""Core data structures for kubedep."""

from kubedep.models.config import (
    APIConfig,
    KubeDepConfig,
    KubernetesConfig,
    LogConfig,
    MCPConfig,
    ResolverConfig,
)

__all__ = [
    "APIConfig",
    "KubeDepConfig",
    "KubernetesConfig",
    "LogConfig",
    "MCPConfig",
    "ResolverConfig",
]
