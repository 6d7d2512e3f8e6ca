"""Validation of dependency request parameters shared by every surface."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

MIN_DEPTH = 1
MAX_DEPTH = 20
DEFAULT_DEPTH = 10


class InvalidParameterError(ValueError):
    """Raised when a request is rejected before anything is fetched."""


class Direction(StrEnum):
    DEPENDENTS = "dependents"
    DEPENDENCIES = "dependencies"


class OutputFormat(StrEnum):
    TREE = "tree"
    JSON = "json"


@dataclass(frozen=True)
class DependencyRequest:
    """A validated request to describe one resource's graph."""

    cluster: str
    kind: str
    name: str
    namespace: str = ""
    direction: Direction = Direction.DEPENDENTS
    depth: int = DEFAULT_DEPTH
    format: OutputFormat = OutputFormat.TREE

    @property
    def dependencies(self) -> bool:
        return self.direction is Direction.DEPENDENCIES


def _required(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidParameterError(f"missing required parameter: {key}")
    return value


def _optional(params: dict[str, Any], key: str, default: str = "") -> str:
    value = params.get(key)
    if isinstance(value, str) and value:
        return value
    return default


def normalize_depth(value: Any) -> int:
    # Anything that is not an in-range integer falls back to the default.
    if isinstance(value, bool):
        return DEFAULT_DEPTH
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not MIN_DEPTH <= value <= MAX_DEPTH:
        return DEFAULT_DEPTH
    return value


def parse_request(params: dict[str, Any]) -> DependencyRequest:
    """Build a DependencyRequest from loosely typed tool or API arguments.

    Raises:
        InvalidParameterError: a required field is missing, or direction or
            format is not one of the accepted values.
    """
    cluster = _required(params, "cluster")
    kind = _required(params, "kind")
    name = _required(params, "name")

    raw_direction = _optional(params, "direction", Direction.DEPENDENTS)
    try:
        direction = Direction(raw_direction)
    except ValueError:
        raise InvalidParameterError("direction must be 'dependents' or 'dependencies'") from None

    raw_format = _optional(params, "format", OutputFormat.TREE)
    try:
        output_format = OutputFormat(raw_format)
    except ValueError:
        raise InvalidParameterError("format must be 'tree' or 'json'") from None

    return DependencyRequest(
        cluster=cluster,
        kind=kind,
        name=name,
        namespace=_optional(params, "namespace"),
        direction=direction,
        depth=normalize_depth(params.get("depth")),
        format=output_format,
    )
