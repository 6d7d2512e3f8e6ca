"""Bounded breadth-first walk over the resolved graph."""

from __future__ import annotations

from collections import deque

from kubedep.graph.models import NodeMap, Result


def traverse(nodes_by_uid: NodeMap, root_uid: str, dependencies: bool, max_depth: int) -> Result:
    """Collect every node within *max_depth* edges of the root.

    Walks ``Node.dependencies`` when *dependencies* is true, otherwise
    ``Node.dependents``. Each node's ``depth`` is set to the shortest
    distance found. A *max_depth* of zero or less means unbounded.

    Raises KeyError if *root_uid* is not in *nodes_by_uid*.
    """
    root = nodes_by_uid[root_uid]
    root.depth = 0
    node_map: NodeMap = {root_uid: root}

    queue: deque[str | None] = deque([root_uid, None])
    visited: set[str] = set()
    depth = 0

    # The queue always holds the trailing level marker, so one entry left
    # means there is nothing more to expand.
    while len(queue) > 1:
        uid = queue.popleft()

        # None marks the end of a BFS level.
        if uid is None:
            depth += 1
            if 0 < max_depth <= depth:
                break
            queue.append(None)
            continue

        if uid in visited:
            continue
        visited.add(uid)

        node = node_map.get(uid)
        if node is None:
            continue

        if node.depth is None or depth < node.depth:
            node.depth = depth

        for neighbor_uid in node.edges(dependencies):
            neighbor = nodes_by_uid.get(neighbor_uid)
            if neighbor is None:
                continue
            if neighbor_uid not in node_map:
                neighbor.depth = depth + 1
                node_map[neighbor_uid] = neighbor
            elif neighbor.depth is not None and depth + 1 < neighbor.depth:
                neighbor.depth = depth + 1
            queue.append(neighbor_uid)

    return Result(node_map=node_map, root_uid=root_uid, dependencies=dependencies)
