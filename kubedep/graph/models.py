"""Data structures for the resource dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubedep.graph.payload import ResourcePayload


class Relationship(StrEnum):
    """Labels describing why an edge exists between two resources."""

    # Owner-dependent
    CONTROLLER_REFERENCE = "ControllerReference"
    OWNER_REFERENCE = "OwnerReference"

    # Pod
    POD_NODE = "PodNode"
    POD_SERVICE_ACCOUNT = "PodServiceAccount"
    POD_VOLUME = "PodVolume"
    POD_CONTAINER_ENVIRONMENT = "PodContainerEnvironment"
    POD_IMAGE_PULL_SECRET = "PodImagePullSecret"

    # Service
    SERVICE = "Service"

    # Ingress & IngressClass
    INGRESS_CLASS = "IngressClass"
    INGRESS_CLASS_PARAMETERS = "IngressClassParameters"
    INGRESS_SERVICE = "IngressService"
    INGRESS_TLS_SECRET = "IngressTLSSecret"

    # PersistentVolume & PersistentVolumeClaim
    PERSISTENT_VOLUME_CLAIM = "PersistentVolumeClaim"
    PERSISTENT_VOLUME_STORAGE_CLASS = "PersistentVolumeStorageClass"

    # RBAC
    ROLE_BINDING_ROLE = "RoleBindingRole"
    ROLE_BINDING_SUBJECT = "RoleBindingSubject"
    CLUSTER_ROLE_BINDING_ROLE = "ClusterRoleBindingRole"
    CLUSTER_ROLE_BINDING_SUBJECT = "ClusterRoleBindingSubject"

    # PodDisruptionBudget
    POD_DISRUPTION_BUDGET = "PodDisruptionBudget"

    # Event
    EVENT_REGARDING = "EventRegarding"


RelationshipSet = set[Relationship]


def sorted_relationships(relationships: RelationshipSet) -> list[str]:
    """Return relationship labels as a sorted list of strings."""
    return sorted(str(r) for r in relationships)


@dataclass(frozen=True)
class ObjectReference:
    """Structural identity of a resource: group, kind, namespace and name.

    Used when only the name of a target is known at extraction time. The
    namespace is empty for cluster-scoped kinds.
    """

    kind: str
    name: str
    namespace: str = ""
    group: str = ""

    @property
    def key(self) -> str:
        """Return the canonical lookup key for this reference."""
        return f"{self.group}\\{self.kind}\\{self.namespace}\\{self.name}"


@dataclass(eq=False)
class Node:
    """A resource in the dependency graph.

    ``dependencies`` maps neighbor UIDs this node points to, ``dependents``
    maps neighbor UIDs pointing at this node. Both are only written through
    :func:`link` so the two sides always mirror each other.
    """

    uid: str
    kind: str
    namespace: str
    name: str
    payload: ResourcePayload
    depth: int | None = None
    dependencies: dict[str, RelationshipSet] = field(default_factory=dict)
    dependents: dict[str, RelationshipSet] = field(default_factory=dict)

    @property
    def group(self) -> str:
        return self.payload.group

    @property
    def reference(self) -> ObjectReference:
        return ObjectReference(group=self.group, kind=self.kind, namespace=self.namespace, name=self.name)

    def edges(self, dependencies: bool) -> dict[str, RelationshipSet]:
        """Return outgoing edges for the requested traversal direction."""
        return self.dependencies if dependencies else self.dependents

    def sort_key(self) -> tuple[str, str, str]:
        return (self.namespace, self.kind, self.name)


NodeMap = dict[str, Node]


def link(source: Node, target: Node, relationship: Relationship) -> None:
    """Record that *source* depends on *target*, writing both endpoints."""
    source.dependencies.setdefault(target.uid, set()).add(relationship)
    target.dependents.setdefault(source.uid, set()).add(relationship)


@dataclass
class RelationshipMap:
    """Relationships one extractor call found for a single node.

    Targets are keyed either by UID, when the extractor knows it, or by
    :attr:`ObjectReference.key` when only the name is known.
    """

    dependencies_by_ref: dict[str, RelationshipSet] = field(default_factory=dict)
    dependencies_by_uid: dict[str, RelationshipSet] = field(default_factory=dict)
    dependents_by_ref: dict[str, RelationshipSet] = field(default_factory=dict)
    dependents_by_uid: dict[str, RelationshipSet] = field(default_factory=dict)

    def add_dependency_by_ref(self, ref: ObjectReference, relationship: Relationship) -> None:
        self.dependencies_by_ref.setdefault(ref.key, set()).add(relationship)

    def add_dependency_by_uid(self, uid: str, relationship: Relationship) -> None:
        self.dependencies_by_uid.setdefault(uid, set()).add(relationship)

    def add_dependent_by_ref(self, ref: ObjectReference, relationship: Relationship) -> None:
        self.dependents_by_ref.setdefault(ref.key, set()).add(relationship)

    def add_dependent_by_uid(self, uid: str, relationship: Relationship) -> None:
        self.dependents_by_uid.setdefault(uid, set()).add(relationship)

    def is_empty(self) -> bool:
        return not (
            self.dependencies_by_ref or self.dependencies_by_uid or self.dependents_by_ref or self.dependents_by_uid
        )


@dataclass
class Result:
    """Nodes reachable from the root within the depth bound."""

    node_map: NodeMap
    root_uid: str
    dependencies: bool = False

    @property
    def root(self) -> Node | None:
        return self.node_map.get(self.root_uid)
