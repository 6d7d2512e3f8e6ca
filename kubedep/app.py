"""Application bootstrap for kubedep.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → resource store → dependency service
              → MCP → REST

Shutdown is fully graceful: components are stopped in reverse startup order.
Each component's stop error is caught and logged independently so that a
single component failure does not prevent the rest from shutting down.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kubedep.config import load_config
from kubedep.models.config import KubeDepConfig
from kubedep.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from kubedep.service import DependencyService
    from kubedep.store.kubernetes import KubernetesResourceStore

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeDepApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` is safe to call on an app that was never started or has
    already stopped.
    """

    def __init__(self, config: KubeDepConfig | None = None) -> None:
        self.config: KubeDepConfig | None = config

        self._store: KubernetesResourceStore | None = None
        self._service: DependencyService | None = None
        self._mcp_server: object | None = None
        self._rest_server: object | None = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        The caller (main()) re-raises this as a non-zero exit.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("kubedep starting", version=_kubedep_version())

        if not (self.config.mcp.enabled or self.config.api.enabled):
            raise _ComponentError("transports", ValueError("neither MCP nor the REST API is enabled"))

        # --- 3. Resource store -------------------------------------------
        await self._start_store()

        # --- 4. Dependency service ---------------------------------------
        await self._start_service()

        # --- 5. MCP server -----------------------------------------------
        if self.config.mcp.enabled:
            await self._start_mcp()

        # --- 6. REST API -------------------------------------------------
        if self.config.api.enabled:
            await self._start_rest()

        self._running = True
        self._log.info(
            "kubedep started",
            mcp=self._mcp_server is not None,
            api_port=self.config.api.port if self._rest_server is not None else None,
        )

    # ------------------------------------------------------------------
    # Component startup helpers
    # ------------------------------------------------------------------

    async def _start_store(self) -> None:
        """Create the Kubernetes resource store; clusters connect lazily."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting resource store")
        try:
            from kubedep.store.kubernetes import KubernetesResourceStore

            self._store = KubernetesResourceStore(self.config.kubernetes)
            self._log.info(
                "resource store started",
                rancher=bool(self.config.kubernetes.rancher_url),
                in_cluster=self.config.kubernetes.in_cluster,
            )
        except Exception as exc:
            raise _ComponentError("store", exc) from exc

    async def _start_service(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._store is not None
        try:
            from kubedep.service import DependencyService

            self._service = DependencyService(
                self._store,
                fetch_timeout=float(self.config.resolver.fetch_timeout_seconds),
            )
        except Exception as exc:
            raise _ComponentError("service", exc) from exc

    async def _start_mcp(self) -> None:
        """Start the MCP stdio server."""
        assert self._log is not None
        assert self.config is not None
        assert self._service is not None
        self._log.debug("starting mcp server")
        try:
            from kubedep.mcp import MCPServer

            mcp = MCPServer(self._service)
            task = asyncio.create_task(mcp.start(), name="mcp-server")
            if not self.config.api.enabled:
                # With stdio as the only transport, client disconnect ends the process.
                task.add_done_callback(self._on_transport_exit)
            self._background_tasks.append(task)
            self._mcp_server = mcp
            self._log.info("mcp server started")
        except Exception as exc:
            if not self.config.api.enabled:
                raise _ComponentError("mcp", exc) from exc
            # MCP is non-fatal while the REST API is available
            self._log.warning(
                "mcp server failed to start; stdio interface unavailable",
                error=str(exc),
            )
            self._mcp_server = None

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        assert self._service is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from kubedep.api import create_app

            fastapi_app = create_app(service=self._service)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    def _on_transport_exit(self, task: asyncio.Task[None]) -> None:
        if not task.cancelled() and task.exception() is not None and self._log is not None:
            self._log.error("mcp server exited with error", error=str(task.exception()))
        self._running = False

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order.

        Each component's stop is wrapped independently; a failure in one
        component's teardown does not prevent the others from stopping.
        """
        if self._log is None:
            # Never started
            return

        log = self._log
        log.info("kubedep shutting down")

        self._running = False

        rest = self._rest_server
        if rest is not None:
            # uvicorn exits its serve() loop on should_exit
            rest.should_exit = True  # type: ignore[attr-defined]

        for task in reversed(self._background_tasks):
            if not task.done() and task.get_name() != "rest-server":
                task.cancel()

        if self._background_tasks:
            done, pending = await asyncio.wait(self._background_tasks, timeout=_SHUTDOWN_GRACE_SECONDS)
            for task in pending:
                log.warning("component stop timed out", component=task.get_name(), timeout=_SHUTDOWN_GRACE_SECONDS)
                task.cancel()
        self._background_tasks.clear()

        self._rest_server = None
        self._mcp_server = None
        self._service = None
        await self._stop_component("store", self._store)
        self._store = None

        log.info("kubedep stopped")
        self._log = None

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call close() on a component if it has that method, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        close_fn = getattr(component, "close", None)
        if close_fn is None:
            return
        try:
            result = close_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))


def _kubedep_version() -> str:
    from kubedep import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: KubeDepConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = KubeDepApp(config)
    loop = asyncio.get_running_loop()

    shutdown = asyncio.Event()

    def _request_shutdown() -> None:
        shutdown.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        # Block until a signal arrives or the only transport exits
        while app.running and not shutdown.is_set():
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=1)
            except TimeoutError:
                continue
    except _ComponentError as exc:
        # A mandatory component failed; log and exit non-zero
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        await app.stop()
