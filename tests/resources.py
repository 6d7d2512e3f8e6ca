"""Kubernetes object factories and an in-memory ResourceStore for tests.

Objects are plain dicts shaped like API server JSON. UIDs are derived from
kind, namespace and name so tests can refer to them without bookkeeping.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import UTC, datetime, timedelta
from typing import Any

from kubedep.store import kinds
from kubedep.store.base import ListOptions, ResourceNotFoundError, StoreError, UnsupportedKindError

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def uid_of(kind: str, name: str, namespace: str = "") -> str:
    return f"uid-{kind.lower()}-{namespace or '_'}-{name}"


def timestamp(age: timedelta) -> str:
    return (NOW - age).strftime("%Y-%m-%dT%H:%M:%SZ")


def make_object(
    api_version: str,
    kind: str,
    name: str,
    namespace: str = "",
    *,
    uid: str | None = None,
    labels: dict[str, str] | None = None,
    owners: list[dict[str, Any]] | None = None,
    created: timedelta | None = None,
    **fields: Any,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name, "uid": uid or uid_of(kind, name, namespace)}
    if namespace:
        metadata["namespace"] = namespace
    if labels:
        metadata["labels"] = labels
    if owners:
        metadata["ownerReferences"] = owners
    if created is not None:
        metadata["creationTimestamp"] = timestamp(created)
    obj: dict[str, Any] = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    obj.update(fields)
    return obj


def owner_ref(owner: dict[str, Any], controller: bool = True) -> dict[str, Any]:
    ref = {
        "apiVersion": owner["apiVersion"],
        "kind": owner["kind"],
        "name": owner["metadata"]["name"],
        "uid": owner["metadata"]["uid"],
    }
    if controller:
        ref["controller"] = True
    return ref


# ---------------------------------------------------------------------------
# Per-kind factories
# ---------------------------------------------------------------------------


def pod(
    name: str,
    namespace: str = "default",
    *,
    node: str = "",
    service_account: str = "",
    spec: dict[str, Any] | None = None,
    status: dict[str, Any] | None = None,
    **kw: Any,
) -> dict[str, Any]:
    pod_spec = dict(spec or {})
    pod_spec.setdefault("containers", [{"name": "app", "image": "nginx"}])
    if node:
        pod_spec["nodeName"] = node
    if service_account:
        pod_spec["serviceAccountName"] = service_account
    fields: dict[str, Any] = {"spec": pod_spec}
    if status is not None:
        fields["status"] = status
    return make_object("v1", "Pod", name, namespace, **fields, **kw)


def node(name: str, **kw: Any) -> dict[str, Any]:
    return make_object("v1", "Node", name, **kw)


def service_account(name: str, namespace: str = "default", **kw: Any) -> dict[str, Any]:
    return make_object("v1", "ServiceAccount", name, namespace, **kw)


def config_map(name: str, namespace: str = "default", **kw: Any) -> dict[str, Any]:
    return make_object("v1", "ConfigMap", name, namespace, data={}, **kw)


def secret(name: str, namespace: str = "default", **kw: Any) -> dict[str, Any]:
    return make_object("v1", "Secret", name, namespace, type="Opaque", **kw)


def service(
    name: str, namespace: str = "default", *, selector: dict[str, str] | None = None, **kw: Any
) -> dict[str, Any]:
    spec: dict[str, Any] = {"ports": [{"port": 80}]}
    if selector is not None:
        spec["selector"] = selector
    return make_object("v1", "Service", name, namespace, spec=spec, **kw)


def deployment(
    name: str, namespace: str = "default", *, replicas: int = 1, ready: int = 1, **kw: Any
) -> dict[str, Any]:
    return make_object(
        "apps/v1",
        "Deployment",
        name,
        namespace,
        spec={"replicas": replicas},
        status={"replicas": replicas, "readyReplicas": ready},
        **kw,
    )


def replica_set(
    name: str, namespace: str = "default", *, replicas: int = 1, ready: int = 1, **kw: Any
) -> dict[str, Any]:
    return make_object(
        "apps/v1",
        "ReplicaSet",
        name,
        namespace,
        spec={"replicas": replicas},
        status={"replicas": replicas, "readyReplicas": ready},
        **kw,
    )


def pvc(name: str, namespace: str = "default", *, volume: str = "", **kw: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {"accessModes": ["ReadWriteOnce"]}
    if volume:
        spec["volumeName"] = volume
    return make_object("v1", "PersistentVolumeClaim", name, namespace, spec=spec, **kw)


def pv(
    name: str,
    *,
    claim: tuple[str, str] | None = None,
    storage_class: str = "",
    **kw: Any,
) -> dict[str, Any]:
    spec: dict[str, Any] = {}
    if claim is not None:
        spec["claimRef"] = {"kind": "PersistentVolumeClaim", "namespace": claim[0], "name": claim[1]}
    if storage_class:
        spec["storageClassName"] = storage_class
    return make_object("v1", "PersistentVolume", name, spec=spec, **kw)


def storage_class(name: str, **kw: Any) -> dict[str, Any]:
    return make_object("storage.k8s.io/v1", "StorageClass", name, provisioner="example.com/disk", **kw)


def ingress(name: str, namespace: str = "default", *, spec: dict[str, Any] | None = None, **kw: Any) -> dict[str, Any]:
    return make_object("networking.k8s.io/v1", "Ingress", name, namespace, spec=spec or {}, **kw)


def ingress_class(name: str, *, parameters: dict[str, Any] | None = None, **kw: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {"controller": "example.com/ingress"}
    if parameters is not None:
        spec["parameters"] = parameters
    return make_object("networking.k8s.io/v1", "IngressClass", name, spec=spec, **kw)


def role(name: str, namespace: str = "default", **kw: Any) -> dict[str, Any]:
    return make_object("rbac.authorization.k8s.io/v1", "Role", name, namespace, rules=[], **kw)


def cluster_role(name: str, **kw: Any) -> dict[str, Any]:
    return make_object("rbac.authorization.k8s.io/v1", "ClusterRole", name, rules=[], **kw)


def _rbac_subjects(subjects: list[tuple[str, str]]) -> list[dict[str, Any]]:
    return [{"kind": "ServiceAccount", "namespace": ns, "name": n} for ns, n in subjects]


def role_binding(
    name: str,
    namespace: str = "default",
    *,
    role_kind: str = "Role",
    role_name: str = "",
    subjects: list[tuple[str, str]] | None = None,
    **kw: Any,
) -> dict[str, Any]:
    return make_object(
        "rbac.authorization.k8s.io/v1",
        "RoleBinding",
        name,
        namespace,
        roleRef={"apiGroup": "rbac.authorization.k8s.io", "kind": role_kind, "name": role_name or name},
        subjects=_rbac_subjects(subjects or []),
        **kw,
    )


def cluster_role_binding(
    name: str,
    *,
    role_name: str = "",
    subjects: list[tuple[str, str]] | None = None,
    **kw: Any,
) -> dict[str, Any]:
    return make_object(
        "rbac.authorization.k8s.io/v1",
        "ClusterRoleBinding",
        name,
        roleRef={"apiGroup": "rbac.authorization.k8s.io", "kind": "ClusterRole", "name": role_name or name},
        subjects=_rbac_subjects(subjects or []),
        **kw,
    )


def pdb(name: str, namespace: str = "default", *, selector: dict[str, Any] | None = None, **kw: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {"minAvailable": 1}
    if selector is not None:
        spec["selector"] = selector
    return make_object("policy/v1", "PodDisruptionBudget", name, namespace, spec=spec, **kw)


def core_event(name: str, regarding: dict[str, Any], namespace: str = "default", **kw: Any) -> dict[str, Any]:
    return make_object(
        "v1",
        "Event",
        name,
        namespace,
        involvedObject={
            "kind": regarding["kind"],
            "name": regarding["metadata"]["name"],
            "uid": regarding["metadata"]["uid"],
        },
        reason="Scheduled",
        **kw,
    )


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class FakeStore:
    """ResourceStore over a list of objects, with injectable list failures."""

    def __init__(
        self,
        objects: list[dict[str, Any]] | None = None,
        failing_kinds: set[str] | None = None,
        slow_kinds: set[str] | None = None,
        delay: float = 5.0,
    ) -> None:
        self.objects: list[dict[str, Any]] = list(objects or [])
        self.failing_kinds = failing_kinds or set()
        self.slow_kinds = slow_kinds or set()
        self.delay = delay
        self.list_calls: list[tuple[str, str, str]] = []
        self.closed = False

    def add(self, *objects: dict[str, Any]) -> None:
        self.objects.extend(objects)

    @staticmethod
    def _info(kind: str) -> kinds.KindInfo:
        info = kinds.lookup(kind)
        if info is None:
            raise UnsupportedKindError(kind)
        return info

    def _matches(self, obj: dict[str, Any], info: kinds.KindInfo) -> bool:
        return obj.get("apiVersion") == info.api_version and obj.get("kind") == info.kind

    async def get(self, cluster: str, kind: str, namespace: str, name: str) -> dict[str, Any]:
        info = self._info(kind)
        for obj in self.objects:
            meta = obj["metadata"]
            if not self._matches(obj, info) or meta.get("name") != name:
                continue
            if info.namespaced and meta.get("namespace", "") != namespace:
                continue
            return copy.deepcopy(obj)
        raise ResourceNotFoundError(info.kind, namespace, name)

    async def list(
        self,
        cluster: str,
        kind: str,
        namespace: str = "",
        options: ListOptions | None = None,
    ) -> list[dict[str, Any]]:
        self.list_calls.append((cluster, kind, namespace))
        if kind in self.failing_kinds:
            raise StoreError(f"list {kind}: forbidden")
        if kind in self.slow_kinds:
            await asyncio.sleep(self.delay)
        info = self._info(kind)
        return [
            copy.deepcopy(obj)
            for obj in self.objects
            if self._matches(obj, info) and (not namespace or obj["metadata"].get("namespace", "") == namespace)
        ]

    async def close(self) -> None:
        self.closed = True
