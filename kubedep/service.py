"""Dependency description service shared by the MCP, REST and CLI surfaces."""

from __future__ import annotations

import time
from datetime import datetime

from kubedep.graph.builder import DEFAULT_FETCH_TIMEOUT, ResolutionError, resolve
from kubedep.graph.render import render_json, render_tree
from kubedep.observability.logging import bind_request, clear_request, get_logger
from kubedep.observability.metrics import graph_nodes, resolution_duration_seconds, resolutions_total
from kubedep.params import DependencyRequest, OutputFormat
from kubedep.store.base import ResourceStore

_logger = get_logger("service")


class DependencyService:
    """Resolves a request against a store and renders the result."""

    def __init__(self, store: ResourceStore, fetch_timeout: float = DEFAULT_FETCH_TIMEOUT) -> None:
        self._store = store
        self._fetch_timeout = fetch_timeout

    async def describe(self, request: DependencyRequest, now: datetime | None = None) -> str:
        """Return the tree or JSON rendering for *request*.

        Raises:
            ResolutionError: the root resource could not be resolved.
        """
        bind_request(request.cluster, request.kind, request.namespace, request.name)
        start = time.monotonic()
        outcome = "error"
        try:
            result = await resolve(
                self._store,
                request.cluster,
                request.kind,
                request.namespace,
                request.name,
                dependencies=request.dependencies,
                max_depth=request.depth,
                fetch_timeout=self._fetch_timeout,
            )
            if request.format is OutputFormat.JSON:
                output = render_json(result, now=now)
            else:
                output = render_tree(result, now=now)
            outcome = "success"
            graph_nodes.observe(len(result.node_map))
            _logger.info(
                "resolution_complete",
                direction=str(request.direction),
                depth=request.depth,
                nodes=len(result.node_map),
            )
            return output
        except ResolutionError as exc:
            outcome = exc.reason
            _logger.warning("resolution_failed", direction=str(request.direction), reason=exc.reason, error=str(exc))
            raise
        finally:
            elapsed = time.monotonic() - start
            resolution_duration_seconds.observe(elapsed)
            resolutions_total.labels(direction=str(request.direction), outcome=outcome).inc()
            clear_request()
