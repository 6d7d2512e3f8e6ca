"""Static catalog of the resource kinds the store can address without discovery."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KindInfo:
    """How to reach one resource kind through the dynamic client."""

    api_version: str
    kind: str
    namespaced: bool
    aliases: tuple[str, ...] = ()


_CATALOG: tuple[KindInfo, ...] = (
    # core/v1
    KindInfo("v1", "Pod", True, ("pods", "po")),
    KindInfo("v1", "Service", True, ("services", "svc")),
    KindInfo("v1", "ConfigMap", True, ("configmaps", "cm")),
    KindInfo("v1", "Secret", True, ("secrets",)),
    KindInfo("v1", "ServiceAccount", True, ("serviceaccounts", "sa")),
    KindInfo("v1", "PersistentVolumeClaim", True, ("persistentvolumeclaims", "pvc")),
    KindInfo("v1", "Event", True, ("events", "ev")),
    KindInfo("v1", "Endpoints", True, ("ep",)),
    KindInfo("v1", "Namespace", False, ("namespaces", "ns")),
    KindInfo("v1", "Node", False, ("nodes", "no")),
    KindInfo("v1", "PersistentVolume", False, ("persistentvolumes", "pv")),
    # apps/v1
    KindInfo("apps/v1", "Deployment", True, ("deployments", "deploy")),
    KindInfo("apps/v1", "StatefulSet", True, ("statefulsets", "sts")),
    KindInfo("apps/v1", "DaemonSet", True, ("daemonsets", "ds")),
    KindInfo("apps/v1", "ReplicaSet", True, ("replicasets", "rs")),
    # batch/v1
    KindInfo("batch/v1", "Job", True, ("jobs",)),
    KindInfo("batch/v1", "CronJob", True, ("cronjobs", "cj")),
    # networking.k8s.io/v1
    KindInfo("networking.k8s.io/v1", "Ingress", True, ("ingresses", "ing")),
    KindInfo("networking.k8s.io/v1", "IngressClass", False, ("ingressclasses",)),
    KindInfo("networking.k8s.io/v1", "NetworkPolicy", True, ("networkpolicies", "netpol")),
    # policy/v1
    KindInfo("policy/v1", "PodDisruptionBudget", True, ("poddisruptionbudgets", "pdb")),
    # rbac.authorization.k8s.io/v1
    KindInfo("rbac.authorization.k8s.io/v1", "Role", True, ("roles",)),
    KindInfo("rbac.authorization.k8s.io/v1", "RoleBinding", True, ("rolebindings",)),
    KindInfo("rbac.authorization.k8s.io/v1", "ClusterRole", False, ("clusterroles",)),
    KindInfo("rbac.authorization.k8s.io/v1", "ClusterRoleBinding", False, ("clusterrolebindings",)),
    # storage.k8s.io/v1
    KindInfo("storage.k8s.io/v1", "StorageClass", False, ("storageclasses", "sc")),
)

_BY_NAME: dict[str, KindInfo] = {}
for _info in _CATALOG:
    _BY_NAME[_info.kind.lower()] = _info
    for _alias in _info.aliases:
        _BY_NAME[_alias] = _info


def lookup(kind: str) -> KindInfo | None:
    """Return the catalog entry for *kind*, matched case-insensitively.

    Accepts the Kind itself, its plural and its kubectl short names.
    """
    return _BY_NAME.get(kind.strip().lower())


def split_dotted(kind: str) -> tuple[str, str] | None:
    """Split ``resource.group`` into ``(resource, group)``.

    Returns None for undotted input.
    """
    resource, sep, group = kind.strip().lower().partition(".")
    if not sep or not resource or not group:
        return None
    return resource, group
