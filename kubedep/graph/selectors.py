"""Kubernetes label selector semantics.

Supports the two selector shapes the extractors meet: a plain label map
(``Service.spec.selector``) and a ``LabelSelector`` with ``matchLabels`` and
``matchExpressions`` (``PodDisruptionBudget.spec.selector``). Keys and values
are validated the way the API server validates them; anything invalid raises
:class:`InvalidSelectorError`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

_NAME_MAX_LEN = 63
_PREFIX_MAX_LEN = 253

_RE_QUALIFIED_NAME = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_RE_DNS1123_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_RE_LABEL_VALUE = re.compile(r"^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$")


class InvalidSelectorError(ValueError):
    """Raised when a selector cannot be turned into requirements."""


class Operator(StrEnum):
    """Selector requirement operators."""

    EQUALS = "="
    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


def validate_label_key(key: str) -> None:
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix or len(prefix) > _PREFIX_MAX_LEN or not _RE_DNS1123_SUBDOMAIN.match(prefix):
            raise InvalidSelectorError(f"invalid label key prefix: {key!r}")
    if not name or len(name) > _NAME_MAX_LEN or not _RE_QUALIFIED_NAME.match(name):
        raise InvalidSelectorError(f"invalid label key: {key!r}")


def validate_label_value(value: str) -> None:
    if len(value) > _NAME_MAX_LEN or not _RE_LABEL_VALUE.match(value):
        raise InvalidSelectorError(f"invalid label value: {value!r}")


@dataclass(frozen=True)
class Requirement:
    """A single key/operator/values constraint."""

    key: str
    operator: Operator
    values: frozenset[str] = frozenset()

    def matches(self, labels: Mapping[str, str]) -> bool:
        match self.operator:
            case Operator.EQUALS | Operator.IN:
                return self.key in labels and labels[self.key] in self.values
            case Operator.NOT_IN:
                return self.key not in labels or labels[self.key] not in self.values
            case Operator.EXISTS:
                return self.key in labels
            case Operator.DOES_NOT_EXIST:
                return self.key not in labels
        return False


@dataclass(frozen=True)
class Selector:
    """A conjunction of requirements. No requirements selects everything."""

    requirements: tuple[Requirement, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        return all(r.matches(labels) for r in self.requirements)


def _requirement(key: str, operator: Operator, values: Iterable[str]) -> Requirement:
    validate_label_key(key)
    values = frozenset(values)
    if operator in (Operator.IN, Operator.NOT_IN):
        if not values:
            raise InvalidSelectorError(f"operator {operator} on {key!r} requires values")
    elif operator in (Operator.EXISTS, Operator.DOES_NOT_EXIST):
        if values:
            raise InvalidSelectorError(f"operator {operator} on {key!r} takes no values")
    elif len(values) != 1:
        raise InvalidSelectorError(f"operator {operator} on {key!r} requires exactly one value")
    for value in values:
        validate_label_value(value)
    return Requirement(key=key, operator=operator, values=values)


def selector_from_set(labels: Mapping[str, str]) -> Selector:
    """Build an equality selector from a label map, validating every pair."""
    requirements = [_requirement(k, Operator.EQUALS, [v]) for k, v in sorted(labels.items())]
    return Selector(tuple(requirements))


def selector_from_label_selector(
    match_labels: Mapping[str, str] | None,
    match_expressions: Iterable[tuple[str, str, Iterable[str]]] | None,
) -> Selector:
    """Build a selector from ``matchLabels`` and ``matchExpressions``.

    Each expression is a ``(key, operator, values)`` tuple. An unknown
    operator raises :class:`InvalidSelectorError`.
    """
    requirements = [_requirement(k, Operator.EQUALS, [v]) for k, v in sorted((match_labels or {}).items())]
    for key, operator, values in match_expressions or ():
        try:
            op = Operator(operator)
        except ValueError as exc:
            raise InvalidSelectorError(f"invalid selector operator: {operator!r}") from exc
        if op is Operator.EQUALS:
            raise InvalidSelectorError(f"invalid selector operator: {operator!r}")
        requirements.append(_requirement(key, op, values))
    return Selector(tuple(requirements))
