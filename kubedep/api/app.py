"""FastAPI application factory for kubedep.

Usage::

    from kubedep.api.app import create_app

    app = create_app(service=service)

The factory is used by both the production bootstrap (``kubedep.app``) and
unit tests.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from kubedep.api.routes import router
from kubedep.api.schemas import ErrorResponse
from kubedep.graph.builder import ResolutionError
from kubedep.params import InvalidParameterError
from kubedep.service import DependencyService

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, detail=detail).model_dump())


def create_app(service: DependencyService) -> FastAPI:
    """Create and configure the kubedep FastAPI application.

    Args:
        service: DependencyService that answers ``POST /dependencies``.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kubedep import __version__

    app = FastAPI(
        title="kubedep",
        summary="Kubernetes resource dependency graph API",
        version=__version__,
        description=(
            "kubedep resolves what a Kubernetes resource depends on, or what "
            "depends on it, and renders the result as a tree or JSON."
        ),
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.service = service

    app.include_router(router, prefix=_API_PREFIX)
    app.mount("/metrics", make_asgi_app())

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        detail = ""
        if errors:
            locs = errors[0].get("loc", ())
            field = str(locs[-1]) if locs else ""
            detail = f"{field}: {errors[0].get('msg', '')}" if field else str(errors[0].get("msg", ""))
        return _error(400, "INVALID_REQUEST", detail)

    @app.exception_handler(InvalidParameterError)
    async def invalid_parameter_handler(_request: Request, exc: InvalidParameterError) -> JSONResponse:
        return _error(400, "INVALID_PARAMETER", str(exc))

    @app.exception_handler(ResolutionError)
    async def resolution_error_handler(request: Request, exc: ResolutionError) -> JSONResponse:
        if exc.reason == "unsupported_kind":
            return _error(400, "UNSUPPORTED_KIND", str(exc.__cause__))
        if exc.reason == "not_found":
            return _error(404, "RESOURCE_NOT_FOUND", str(exc))
        _log.error("resolution_error", path=str(request.url.path), error=str(exc))
        return _error(500, "RESOLUTION_FAILED", str(exc))

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return _error(500, "INTERNAL_ERROR", "An unexpected error occurred.")

    return app
