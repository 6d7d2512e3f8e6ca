"""Graph construction: fetch, index, wire edges, traverse.

``resolve`` runs in two strictly separated phases. The fetch phase lists
every cataloged kind concurrently and only appends to a shared list under a
lock. The graph phase is single-threaded and is the only place node
adjacency is written.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from kubedep.graph.extractors import extract_relationships
from kubedep.graph.index import ObjectIndex
from kubedep.graph.models import Node, Relationship, RelationshipMap, RelationshipSet, Result, link
from kubedep.graph.traversal import traverse
from kubedep.observability.logging import get_logger
from kubedep.observability.metrics import kind_list_failures_total
from kubedep.store.base import ResourceNotFoundError, ResourceStore, UnsupportedKindError

_logger = get_logger("graph.builder")

DEFAULT_FETCH_TIMEOUT = 10.0


class ResolutionError(Exception):
    """Raised when the graph for a root resource cannot be built."""

    @property
    def reason(self) -> str:
        """Classify the failure by its cause: ``not_found``, ``unsupported_kind`` or ``failed``."""
        cause = self.__cause__
        if isinstance(cause, UnsupportedKindError):
            return "unsupported_kind"
        if cause is None or isinstance(cause, ResourceNotFoundError):
            return "not_found"
        return "failed"


@dataclass(frozen=True)
class KindSpec:
    """A resource kind fetched for every resolution."""

    kind: str
    cluster_scoped: bool = False


RESOURCE_CATALOG: tuple[KindSpec, ...] = (
    # core
    KindSpec("pod"),
    KindSpec("service"),
    KindSpec("configmap"),
    KindSpec("secret"),
    KindSpec("serviceaccount"),
    KindSpec("persistentvolumeclaim"),
    KindSpec("event"),
    KindSpec("node", cluster_scoped=True),
    KindSpec("persistentvolume", cluster_scoped=True),
    # apps
    KindSpec("deployment"),
    KindSpec("statefulset"),
    KindSpec("daemonset"),
    KindSpec("replicaset"),
    # batch
    KindSpec("job"),
    KindSpec("cronjob"),
    # networking
    KindSpec("ingress"),
    KindSpec("ingressclass", cluster_scoped=True),
    # policy
    KindSpec("poddisruptionbudget"),
    # rbac
    KindSpec("role"),
    KindSpec("rolebinding"),
    KindSpec("clusterrole", cluster_scoped=True),
    KindSpec("clusterrolebinding", cluster_scoped=True),
    # storage
    KindSpec("storageclass", cluster_scoped=True),
)


async def resolve(
    store: ResourceStore,
    cluster: str,
    kind: str,
    namespace: str,
    name: str,
    dependencies: bool = False,
    max_depth: int = 10,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    catalog: tuple[KindSpec, ...] = RESOURCE_CATALOG,
) -> Result:
    """Resolve the dependency or dependent graph of one resource.

    Args:
        store:         Resource store to read from.
        cluster:       Cluster identifier passed through to the store.
        kind:          Root resource kind (any form the store accepts).
        namespace:     Root namespace; empty for cluster-scoped roots.
        name:          Root resource name.
        dependencies:  Walk dependencies when true, dependents otherwise.
        max_depth:     Number of BFS levels to expand from the root.
        fetch_timeout: Per-kind list timeout in seconds.
        catalog:       Kinds listed to populate the graph.

    Raises:
        ResolutionError: the root cannot be fetched or is missing from the
            built index.
    """
    try:
        root = await store.get(cluster, kind, namespace, name)
    except Exception as exc:
        raise ResolutionError(f"failed to get root resource {kind}/{name}: {exc}") from exc

    root_namespace = namespace or _metadata(root).get("namespace") or ""
    objects = await list_all_resources(store, cluster, root_namespace, fetch_timeout, catalog)
    objects.append(root)

    index = ObjectIndex.build(objects)
    add_owner_relationships(index)
    add_semantic_relationships(index)

    root_uid = str(_metadata(root).get("uid") or "")
    if root_uid not in index:
        raise ResolutionError(f"root resource {kind}/{name} not found in graph")

    result = traverse(index.by_uid, root_uid, dependencies, max_depth)
    _logger.debug(
        "graph_built",
        cluster=cluster,
        kind=kind,
        namespace=namespace,
        name=name,
        objects=len(objects),
        indexed=len(index),
        reachable=len(result.node_map),
    )
    return result


async def list_all_resources(
    store: ResourceStore,
    cluster: str,
    namespace: str,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
    catalog: tuple[KindSpec, ...] = RESOURCE_CATALOG,
) -> list[dict[str, Any]]:
    """List every cataloged kind concurrently.

    Namespaced kinds are listed in *namespace* only, cluster-scoped kinds
    cluster-wide. A kind that fails or times out contributes nothing.
    """
    lock = asyncio.Lock()
    items: list[dict[str, Any]] = []

    async def _fetch(spec: KindSpec) -> None:
        ns = "" if spec.cluster_scoped else namespace
        try:
            listed = await asyncio.wait_for(store.list(cluster, spec.kind, ns), timeout=fetch_timeout)
        except Exception as exc:
            kind_list_failures_total.labels(kind=spec.kind).inc()
            _logger.debug("kind_list_failed", cluster=cluster, kind=spec.kind, namespace=ns, error=str(exc))
            return
        async with lock:
            items.extend(listed)

    await asyncio.gather(*(_fetch(spec) for spec in catalog))
    return items


def add_owner_relationships(index: ObjectIndex) -> None:
    """Link every node to the owners listed in its ownerReferences."""
    for node in index.by_uid.values():
        for ref in node.payload.owner_references:
            owner = index.by_uid.get(ref.uid)
            if owner is None:
                continue
            if ref.controller:
                link(node, owner, Relationship.CONTROLLER_REFERENCE)
            link(node, owner, Relationship.OWNER_REFERENCE)


def add_semantic_relationships(index: ObjectIndex) -> None:
    """Run the per-kind extractors and apply what they find."""
    for node in list(index.by_uid.values()):
        rmap = extract_relationships(node, index.by_uid)
        if rmap is None or rmap.is_empty():
            continue
        apply_relationships(node, rmap, index)


def apply_relationships(node: Node, rmap: RelationshipMap, index: ObjectIndex) -> None:
    """Write a RelationshipMap into node adjacency.

    Reference keys are resolved through the index; targets that are not in
    the snapshot are dropped.
    """
    for key, rset in rmap.dependencies_by_ref.items():
        _link_all(node, index.resolve(key), rset)
    for key, rset in rmap.dependents_by_ref.items():
        _link_all(index.resolve(key), node, rset)
    for uid, rset in rmap.dependencies_by_uid.items():
        _link_all(node, index.by_uid.get(uid), rset)
    for uid, rset in rmap.dependents_by_uid.items():
        _link_all(index.by_uid.get(uid), node, rset)


def _link_all(source: Node | None, target: Node | None, relationships: RelationshipSet) -> None:
    if source is None or target is None:
        return
    for relationship in sorted(relationships):
        link(source, target, relationship)


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    metadata = obj.get("metadata")
    return metadata if isinstance(metadata, dict) else {}
