"""Resource dependency graph.

Exposes:
    resolve        -- build and walk the graph around one resource.
    render_tree    -- table rendering with tree-drawn names.
    render_json    -- nested JSON rendering.
    Relationship   -- edge labels.
    Result         -- nodes reachable from the root.
"""

from kubedep.graph.builder import RESOURCE_CATALOG, ResolutionError, resolve
from kubedep.graph.models import Node, ObjectReference, Relationship, RelationshipMap, Result
from kubedep.graph.render import render_json, render_tree

__all__ = [
    "RESOURCE_CATALOG",
    "Node",
    "ObjectReference",
    "Relationship",
    "RelationshipMap",
    "ResolutionError",
    "Result",
    "render_json",
    "render_tree",
    "resolve",
]
