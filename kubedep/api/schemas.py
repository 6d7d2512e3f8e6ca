"""Request and response bodies for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from kubedep.params import DEFAULT_DEPTH


class DependencyRequestBody(BaseModel):
    """Body of ``POST /dependencies``.

    Presence and enum checks happen in :func:`kubedep.params.parse_request`
    so every surface rejects the same inputs with the same messages.
    """

    cluster: str = ""
    kind: str = ""
    name: str = ""
    namespace: str = ""
    direction: str = "dependents"
    depth: int = Field(default=DEFAULT_DEPTH, description="Maximum traversal depth; out of range means default")
    format: str = "tree"


class DependencyResponse(BaseModel):
    format: str
    output: str


class HealthResponse(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response."""

    error: str
    detail: str
