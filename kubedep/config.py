"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from urllib.parse import urlparse

from kubedep.models.config import (
    APIConfig,
    KubeDepConfig,
    KubernetesConfig,
    LogConfig,
    MCPConfig,
    ResolverConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEDEP_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError:
        raise ValueError(f"Invalid integer for KUBEDEP_{key}: {raw!r}") from None
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_url(value: str) -> str:
    if not value:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid Rancher URL: {value}")
    return value.rstrip("/")


def load_config() -> KubeDepConfig:
    """Load configuration from KUBEDEP_* environment variables."""
    return KubeDepConfig(
        kubernetes=KubernetesConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            in_cluster=_env_bool("IN_CLUSTER", False),
            rancher_url=_validate_url(_env("RANCHER_URL", "")),
            rancher_token=_env("RANCHER_TOKEN", ""),
            rancher_insecure=_env_bool("RANCHER_INSECURE", False),
        ),
        resolver=ResolverConfig(
            fetch_timeout_seconds=_env_int("FETCH_TIMEOUT", 10, min_val=1, max_val=120),
        ),
        mcp=MCPConfig(
            enabled=_env_bool("MCP_ENABLED", True),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", False),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
