"""Text and JSON renderings of a resolved dependency graph.

Both renderers walk the result from the root in (namespace, kind, name)
order and share one visited set per call, so a node reachable along
several paths is expanded only the first time it is met.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from kubedep.graph.models import Node, NodeMap, RelationshipSet, Result, sorted_relationships

NO_DATA = "No dependency data found"
NO_ROOT = "Root node not found"

_HEADER_FORMAT = "{:<12} {:<50} {:<8} {:<12} {:<6} {}"
_NAME_WIDTH = 46

_BRANCH = "├── "
_LAST_BRANCH = "└── "
_PIPE = "│   "
_SPACE = "    "


# ---------------------------------------------------------------------------
# Column values
# ---------------------------------------------------------------------------


def _int_field(node: Node, *fields: str) -> int:
    value = node.payload.get(*fields)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return int(value)


def _ready_condition(node: Node, attr: str) -> str:
    conditions = node.payload.get("status", "conditions")
    if not isinstance(conditions, list):
        return ""
    for condition in conditions:
        if isinstance(condition, dict) and condition.get("type") == "Ready":
            value = condition.get(attr)
            if isinstance(value, str) and value:
                return value
    return ""


def node_ready(node: Node) -> str:
    """READY column: replica or container counts, else the Ready condition."""
    if node.kind in ("Deployment", "ReplicaSet", "StatefulSet"):
        ready = _int_field(node, "status", "readyReplicas")
        replicas = _int_field(node, "status", "replicas")
        return f"{ready}/{replicas}"

    if node.kind == "Pod":
        statuses = node.payload.get("status", "containerStatuses")
        if isinstance(statuses, list):
            ready = sum(1 for cs in statuses if isinstance(cs, dict) and cs.get("ready") is True)
            return f"{ready}/{len(statuses)}"

    return _ready_condition(node, "status") or "-"


def node_status(node: Node) -> str:
    """STATUS column: Pod phase or Node Ready reason."""
    if node.kind == "Pod":
        phase = node.payload.get("status", "phase")
        return phase if isinstance(phase, str) else ""
    if node.kind == "Node":
        return _ready_condition(node, "reason")
    return ""


def node_age(node: Node, now: datetime | None = None) -> str:
    """AGE column in the largest whole unit: seconds, minutes, hours or days."""
    created = node.payload.creation_timestamp
    if created is None:
        return "-"
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)

    seconds = (now - created).total_seconds()
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds / 60)}m"
    if seconds < 86400:
        return f"{int(seconds / 3600)}h"
    return f"{int(seconds / 86400)}d"


def truncate(s: str, max_len: int) -> str:
    """Shorten *s* to *max_len*, marking the cut with "..." when there is room."""
    if max_len <= 0 or len(s) <= max_len:
        return s
    if max_len <= 3:
        return s[:max_len]
    return s[: max_len - 3] + "..."


def sorted_children(node_map: NodeMap, edges: dict[str, RelationshipSet], self_uid: str) -> list[Node]:
    """Neighbors present in the result, self excluded, ordered for display."""
    children = [node_map[uid] for uid in edges if uid != self_uid and uid in node_map]
    children.sort(key=Node.sort_key)
    return children


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


def render_tree(result: Result | None, now: datetime | None = None) -> str:
    """Render *result* as a kubectl-style table with tree-drawn names."""
    if result is None or not result.node_map:
        return NO_DATA
    root = result.root
    if root is None:
        return NO_ROOT

    now = now or datetime.now(UTC)
    lines = [_HEADER_FORMAT.format("NAMESPACE", "NAME", "READY", "STATUS", "AGE", "RELATIONSHIPS")]
    _tree_lines(lines, result, root, "", True, True, set(), set(), now)
    return "\n".join(lines) + "\n"


def _tree_lines(
    lines: list[str],
    result: Result,
    node: Node,
    prefix: str,
    is_root: bool,
    is_last: bool,
    relationships: RelationshipSet,
    visited: set[str],
    now: datetime,
) -> None:
    connector = ""
    if not is_root:
        connector = _LAST_BRANCH if is_last else _BRANCH
    lead = prefix + connector
    label = truncate(f"{node.kind}/{node.name}", _NAME_WIDTH - len(lead))
    rels = "[" + " ".join(sorted_relationships(relationships)) + "]"

    lines.append(
        _HEADER_FORMAT.format(
            truncate(node.namespace or "-", 12),
            lead + label,
            truncate(node_ready(node), 8),
            truncate(node_status(node), 12),
            truncate(node_age(node, now), 6),
            rels,
        )
    )

    # Revisits print their line but are not expanded.
    if node.uid in visited:
        return
    visited.add(node.uid)

    edges = node.edges(result.dependencies)
    children = sorted_children(result.node_map, edges, node.uid)
    child_prefix = prefix if is_root else prefix + (_SPACE if is_last else _PIPE)
    for i, child in enumerate(children):
        _tree_lines(
            lines,
            result,
            child,
            child_prefix,
            False,
            i == len(children) - 1,
            edges[child.uid],
            visited,
            now,
        )


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def render_json(result: Result | None, now: datetime | None = None) -> str:
    """Render *result* as nested JSON objects, children under ``children``."""
    if result is None or not result.node_map:
        return "[]"
    root = result.root
    if root is None:
        return "[]"

    now = now or datetime.now(UTC)
    tree = _json_node(result, root, set(), set(), now)
    return json.dumps(tree, indent=2, ensure_ascii=False)


def _json_node(
    result: Result,
    node: Node,
    relationships: RelationshipSet,
    visited: set[str],
    now: datetime,
) -> dict[str, Any]:
    if node.uid in visited:
        return _compact({"kind": node.kind, "namespace": node.namespace, "name": node.name})
    visited.add(node.uid)

    doc: dict[str, Any] = {
        "kind": node.kind,
        "namespace": node.namespace,
        "name": node.name,
        "ready": node_ready(node),
        "status": node_status(node),
        "age": node_age(node, now),
        "relationships": sorted_relationships(relationships),
    }

    edges = node.edges(result.dependencies)
    doc["children"] = [
        _json_node(result, child, edges[child.uid], visited, now)
        for child in sorted_children(result.node_map, edges, node.uid)
    ]
    return _compact(doc)


def _compact(doc: dict[str, Any]) -> dict[str, Any]:
    # kind and name are always emitted; everything else only when set.
    return {k: v for k, v in doc.items() if v or k in ("kind", "name")}
