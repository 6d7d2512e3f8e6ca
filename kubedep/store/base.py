"""Resource store contract used by the graph builder.

A store fetches raw resource documents (plain dicts shaped like the API
server's JSON) by cluster, kind, namespace and name. The graph builder only
depends on this protocol, so tests and alternative backends can plug in
without a Kubernetes client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class StoreError(Exception):
    """Raised when the store cannot serve a request."""


class ResourceNotFoundError(StoreError):
    """Raised by ``get`` when the named resource does not exist."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        location = f"{namespace}/{name}" if namespace else name
        super().__init__(f"{kind} {location} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class UnsupportedKindError(StoreError):
    """Raised when a kind cannot be mapped to an API resource."""

    def __init__(self, kind: str, reason: str = "") -> None:
        message = f"unsupported resource kind: {kind}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class ListOptions:
    """Server-side filters passed through to list calls."""

    label_selector: str = ""
    field_selector: str = ""
    limit: int = 0


class ResourceStore(Protocol):
    """Read access to cluster resources."""

    async def get(self, cluster: str, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Return one resource; raise ResourceNotFoundError if absent."""
        ...

    async def list(
        self,
        cluster: str,
        kind: str,
        namespace: str = "",
        options: ListOptions | None = None,
    ) -> list[dict[str, Any]]:
        """Return every resource of *kind*; an empty namespace means all namespaces."""
        ...
