"""REST API route handlers."""

from __future__ import annotations

from fastapi import APIRouter, Request

from kubedep import __version__
from kubedep.api.schemas import DependencyRequestBody, DependencyResponse, ErrorResponse, HealthResponse
from kubedep.params import parse_request
from kubedep.service import DependencyService

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@router.post(
    "/dependencies",
    response_model=DependencyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def describe_dependencies(body: DependencyRequestBody, request: Request) -> DependencyResponse:
    """Resolve and render the dependency graph of one resource."""
    params = parse_request(body.model_dump())
    service: DependencyService = request.app.state.service
    output = await service.describe(params)
    return DependencyResponse(format=str(params.format), output=output)
