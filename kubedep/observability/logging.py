"""structlog setup shared by the MCP server, the REST API and the CLI."""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "info", json_output: bool = True) -> None:
    """Send kubedep logs to stderr, as JSON lines or as console text.

    stdout carries the MCP stdio transport and the CLI's rendered graph, so
    nothing may be logged there. The CLI passes ``json_output=False``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Return a logger tagged with the kubedep component that emits through it."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


def bind_request(cluster: str, kind: str, namespace: str, name: str) -> None:
    """Attach the resource being resolved to every log line of the current task."""
    structlog.contextvars.bind_contextvars(cluster=cluster, kind=kind, namespace=namespace, name=name)


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
