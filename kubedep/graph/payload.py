"""Read-only accessors over a raw Kubernetes resource document.

The graph layer only needs a handful of metadata fields from each resource
(UID, group/version/kind, labels, owner references). Everything else stays
in the underlying dict and is decoded per kind by the extractors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class OwnerReference:
    """An entry of ``metadata.ownerReferences``."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts; core resources have no group."""
    if "/" in api_version:
        group, _, version = api_version.partition("/")
        return group, version
    return "", api_version


def nested(obj: Any, *fields: str) -> Any:
    """Walk nested dicts, returning None as soon as a field is missing."""
    current = obj
    for name in fields:
        if not isinstance(current, dict):
            return None
        current = current.get(name)
    return current


class ResourcePayload:
    """Wraps a resource dict and exposes its standard metadata."""

    __slots__ = ("_content",)

    def __init__(self, content: dict[str, Any]) -> None:
        self._content = content

    @property
    def content(self) -> dict[str, Any]:
        return self._content

    @property
    def metadata(self) -> dict[str, Any]:
        metadata = self._content.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    @property
    def api_version(self) -> str:
        return str(self._content.get("apiVersion") or "")

    @property
    def group(self) -> str:
        return split_api_version(self.api_version)[0]

    @property
    def kind(self) -> str:
        return str(self._content.get("kind") or "")

    @property
    def uid(self) -> str:
        return str(self.metadata.get("uid") or "")

    @property
    def namespace(self) -> str:
        return str(self.metadata.get("namespace") or "")

    @property
    def name(self) -> str:
        return str(self.metadata.get("name") or "")

    @property
    def labels(self) -> dict[str, str]:
        labels = self.metadata.get("labels")
        if not isinstance(labels, dict):
            return {}
        return {str(k): str(v) for k, v in labels.items()}

    @property
    def owner_references(self) -> list[OwnerReference]:
        refs = self.metadata.get("ownerReferences")
        if not isinstance(refs, list):
            return []
        owners = []
        for ref in refs:
            if not isinstance(ref, dict):
                continue
            owners.append(
                OwnerReference(
                    api_version=str(ref.get("apiVersion") or ""),
                    kind=str(ref.get("kind") or ""),
                    name=str(ref.get("name") or ""),
                    uid=str(ref.get("uid") or ""),
                    controller=ref.get("controller") is True,
                )
            )
        return owners

    @property
    def creation_timestamp(self) -> datetime | None:
        raw = self.metadata.get("creationTimestamp")
        if isinstance(raw, datetime):
            return raw
        if not isinstance(raw, str) or not raw:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None

    def get(self, *fields: str) -> Any:
        """Return the value at a nested field path, or None."""
        return nested(self._content, *fields)

    def __repr__(self) -> str:
        return f"ResourcePayload({self.kind}/{self.namespace}/{self.name})"
