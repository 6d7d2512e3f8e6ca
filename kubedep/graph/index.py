"""Lookup tables over one snapshot of fetched resources."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from kubedep.graph.models import Node, NodeMap
from kubedep.graph.payload import ResourcePayload


@dataclass
class ObjectIndex:
    """Nodes keyed by UID and by :attr:`ObjectReference.key`."""

    by_uid: NodeMap = field(default_factory=dict)
    by_key: dict[str, Node] = field(default_factory=dict)

    @classmethod
    def build(cls, objects: Iterable[dict[str, Any]]) -> ObjectIndex:
        """Index every object that has a UID.

        Objects without a UID cannot take part in the graph and are skipped.
        The first object seen for a UID wins.
        """
        index = cls()
        for obj in objects:
            payload = ResourcePayload(obj)
            uid = payload.uid
            if not uid or uid in index.by_uid:
                continue
            node = Node(
                uid=uid,
                kind=payload.kind,
                namespace=payload.namespace,
                name=payload.name,
                payload=payload,
            )
            index.by_uid[uid] = node
            index.by_key[node.reference.key] = node
        return index

    def resolve(self, key: str) -> Node | None:
        return self.by_key.get(key)

    def __len__(self) -> int:
        return len(self.by_uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self.by_uid
