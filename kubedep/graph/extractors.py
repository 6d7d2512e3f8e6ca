"""Per-kind relationship extraction.

Every extractor takes a node and the full UID map and returns the
relationships that node's spec declares, or None when the kind has none or
its payload cannot be decoded. Extractors never touch node adjacency; the
builder applies their output.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import ValidationError

from kubedep.graph import kinds
from kubedep.graph.models import Node, NodeMap, ObjectReference, Relationship, RelationshipMap
from kubedep.graph.selectors import InvalidSelectorError, Selector, selector_from_label_selector, selector_from_set
from kubedep.observability.logging import get_logger

_logger = get_logger("graph.extractors")

RBAC_GROUP = "rbac.authorization.k8s.io"
NETWORKING_GROUP = "networking.k8s.io"
STORAGE_GROUP = "storage.k8s.io"
POLICY_GROUP = "policy"
EVENTS_GROUP = "events.k8s.io"

Extractor = Callable[[Node, NodeMap], RelationshipMap | None]


def _decode(model: type[kinds.M], node: Node) -> kinds.M | None:
    try:
        return kinds.decode(model, node.payload.content)
    except ValidationError as exc:
        _logger.debug(
            "payload_decode_failed",
            kind=node.kind,
            namespace=node.namespace,
            name=node.name,
            errors=exc.error_count(),
        )
        return None


def _matching_pods(nodes_by_uid: NodeMap, namespace: str, selector: Selector) -> list[Node]:
    return [
        n
        for n in nodes_by_uid.values()
        if n.kind == "Pod" and n.group == "" and n.namespace == namespace and selector.matches(n.payload.labels)
    ]


# ---------------------------------------------------------------------------
# Pod
# ---------------------------------------------------------------------------


def pod_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Node, ServiceAccount, image pull secrets, volumes and env references."""
    pod = _decode(kinds.Pod, node)
    if pod is None:
        return None

    ns = pod.metadata.namespace or node.namespace
    spec = pod.spec
    result = RelationshipMap()

    if spec.node_name:
        result.add_dependency_by_ref(ObjectReference(kind="Node", name=spec.node_name), Relationship.POD_NODE)

    if spec.service_account_name:
        result.add_dependency_by_ref(
            ObjectReference(kind="ServiceAccount", name=spec.service_account_name, namespace=ns),
            Relationship.POD_SERVICE_ACCOUNT,
        )

    for secret in spec.image_pull_secrets:
        result.add_dependency_by_ref(
            ObjectReference(kind="Secret", name=secret.name, namespace=ns),
            Relationship.POD_IMAGE_PULL_SECRET,
        )

    for volume in spec.volumes:
        for ref in _volume_references(volume, ns):
            result.add_dependency_by_ref(ref, Relationship.POD_VOLUME)

    for container in [*spec.init_containers, *spec.containers]:
        for ref in _container_env_references(container, ns):
            result.add_dependency_by_ref(ref, Relationship.POD_CONTAINER_ENVIRONMENT)

    return result


def _volume_references(volume: kinds.Volume, ns: str) -> list[ObjectReference]:
    # A volume has exactly one source; the first populated one wins.
    if volume.config_map is not None:
        return [ObjectReference(kind="ConfigMap", name=volume.config_map.name, namespace=ns)]
    if volume.secret is not None:
        return [ObjectReference(kind="Secret", name=volume.secret.secret_name, namespace=ns)]
    if volume.persistent_volume_claim is not None:
        return [
            ObjectReference(kind="PersistentVolumeClaim", name=volume.persistent_volume_claim.claim_name, namespace=ns)
        ]
    if volume.projected is not None:
        refs = []
        for source in volume.projected.sources:
            if source.config_map is not None:
                refs.append(ObjectReference(kind="ConfigMap", name=source.config_map.name, namespace=ns))
            elif source.secret is not None:
                refs.append(ObjectReference(kind="Secret", name=source.secret.name, namespace=ns))
        return refs
    return []


def _container_env_references(container: kinds.Container, ns: str) -> list[ObjectReference]:
    refs = []
    for env_from in container.env_from:
        if env_from.config_map_ref is not None:
            refs.append(ObjectReference(kind="ConfigMap", name=env_from.config_map_ref.name, namespace=ns))
        elif env_from.secret_ref is not None:
            refs.append(ObjectReference(kind="Secret", name=env_from.secret_ref.name, namespace=ns))
    for env in container.env:
        source = env.value_from
        if source is None:
            continue
        if source.config_map_key_ref is not None:
            refs.append(ObjectReference(kind="ConfigMap", name=source.config_map_key_ref.name, namespace=ns))
        elif source.secret_key_ref is not None:
            refs.append(ObjectReference(kind="Secret", name=source.secret_key_ref.name, namespace=ns))
    return refs


# ---------------------------------------------------------------------------
# Selector-based
# ---------------------------------------------------------------------------


def service_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Pods in the Service's namespace matched by ``spec.selector``."""
    svc = _decode(kinds.Service, node)
    if svc is None or not svc.spec.selector:
        return None

    try:
        selector = selector_from_set(svc.spec.selector)
    except InvalidSelectorError as exc:
        _logger.debug("invalid_selector", kind=node.kind, namespace=node.namespace, name=node.name, error=str(exc))
        return None

    ns = svc.metadata.namespace or node.namespace
    result = RelationshipMap()
    for pod in _matching_pods(nodes_by_uid, ns, selector):
        result.add_dependency_by_ref(pod.reference, Relationship.SERVICE)
    return result


def pdb_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Pods in the budget's namespace matched by ``spec.selector``."""
    pdb = _decode(kinds.PodDisruptionBudget, node)
    if pdb is None or pdb.spec.selector is None:
        return None

    label_selector = pdb.spec.selector
    try:
        selector = selector_from_label_selector(
            label_selector.match_labels,
            [(e.key, e.operator, e.values) for e in label_selector.match_expressions or []],
        )
    except InvalidSelectorError as exc:
        _logger.debug("invalid_selector", kind=node.kind, namespace=node.namespace, name=node.name, error=str(exc))
        return None

    ns = pdb.metadata.namespace or node.namespace
    result = RelationshipMap()
    for pod in _matching_pods(nodes_by_uid, ns, selector):
        result.add_dependency_by_ref(pod.reference, Relationship.POD_DISRUPTION_BUDGET)
    return result


# ---------------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------------


def ingress_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """IngressClass, backend Services and TLS Secrets."""
    ing = _decode(kinds.Ingress, node)
    if ing is None:
        return None

    ns = ing.metadata.namespace or node.namespace
    spec = ing.spec
    result = RelationshipMap()

    if spec.ingress_class_name:
        result.add_dependency_by_ref(
            ObjectReference(group=NETWORKING_GROUP, kind="IngressClass", name=spec.ingress_class_name),
            Relationship.INGRESS_CLASS,
        )

    backends = [spec.default_backend] if spec.default_backend is not None else []
    for rule in spec.rules:
        if rule.http is not None:
            backends.extend(path.backend for path in rule.http.paths)
    for backend in backends:
        if backend.service is not None:
            result.add_dependency_by_ref(
                ObjectReference(kind="Service", name=backend.service.name, namespace=ns),
                Relationship.INGRESS_SERVICE,
            )

    for tls in spec.tls:
        if tls.secret_name:
            result.add_dependency_by_ref(
                ObjectReference(kind="Secret", name=tls.secret_name, namespace=ns),
                Relationship.INGRESS_TLS_SECRET,
            )

    return result


def ingress_class_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """The controller-specific ``spec.parameters`` object."""
    ingc = _decode(kinds.IngressClass, node)
    if ingc is None:
        return None

    result = RelationshipMap()
    params = ingc.spec.parameters
    if params is not None:
        result.add_dependency_by_ref(
            ObjectReference(
                group=params.api_group or "",
                kind=params.kind,
                namespace=params.namespace or "",
                name=params.name,
            ),
            Relationship.INGRESS_CLASS_PARAMETERS,
        )
    return result


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def pv_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Bound claim and StorageClass."""
    pv = _decode(kinds.PersistentVolume, node)
    if pv is None:
        return None

    result = RelationshipMap()
    claim = pv.spec.claim_ref
    if claim is not None:
        result.add_dependency_by_ref(
            ObjectReference(kind="PersistentVolumeClaim", name=claim.name, namespace=claim.namespace),
            Relationship.PERSISTENT_VOLUME_CLAIM,
        )
    if pv.spec.storage_class_name:
        result.add_dependency_by_ref(
            ObjectReference(group=STORAGE_GROUP, kind="StorageClass", name=pv.spec.storage_class_name),
            Relationship.PERSISTENT_VOLUME_STORAGE_CLASS,
        )
    return result


def pvc_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Bound PersistentVolume."""
    pvc = _decode(kinds.PersistentVolumeClaim, node)
    if pvc is None:
        return None

    result = RelationshipMap()
    if pvc.spec.volume_name:
        result.add_dependency_by_ref(
            ObjectReference(kind="PersistentVolume", name=pvc.spec.volume_name),
            Relationship.PERSISTENT_VOLUME_CLAIM,
        )
    return result


# ---------------------------------------------------------------------------
# RBAC
# ---------------------------------------------------------------------------


def _service_account_subjects(subjects: list[kinds.Subject]) -> list[ObjectReference]:
    return [
        ObjectReference(kind="ServiceAccount", namespace=s.namespace, name=s.name)
        for s in subjects
        if s.kind == "ServiceAccount" and s.api_group == "" and s.namespace
    ]


def role_binding_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Referenced Role or ClusterRole, and ServiceAccount subjects.

    Subjects land in the dependents partition: the ServiceAccount ends up
    depending on the binding.
    """
    rb = _decode(kinds.RoleBinding, node)
    if rb is None:
        return None

    ns = rb.metadata.namespace or node.namespace
    result = RelationshipMap()

    role_ref = rb.role_ref
    if role_ref.api_group == RBAC_GROUP:
        if role_ref.kind == "ClusterRole":
            result.add_dependency_by_ref(
                ObjectReference(group=RBAC_GROUP, kind="ClusterRole", name=role_ref.name),
                Relationship.ROLE_BINDING_ROLE,
            )
        elif role_ref.kind == "Role":
            result.add_dependency_by_ref(
                ObjectReference(group=RBAC_GROUP, kind="Role", namespace=ns, name=role_ref.name),
                Relationship.ROLE_BINDING_ROLE,
            )

    for ref in _service_account_subjects(rb.subjects):
        result.add_dependent_by_ref(ref, Relationship.ROLE_BINDING_SUBJECT)

    return result


def cluster_role_binding_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Referenced ClusterRole and ServiceAccount subjects."""
    crb = _decode(kinds.ClusterRoleBinding, node)
    if crb is None:
        return None

    result = RelationshipMap()
    role_ref = crb.role_ref
    if role_ref.api_group == RBAC_GROUP and role_ref.kind == "ClusterRole":
        result.add_dependency_by_ref(
            ObjectReference(group=RBAC_GROUP, kind="ClusterRole", name=role_ref.name),
            Relationship.CLUSTER_ROLE_BINDING_ROLE,
        )

    for ref in _service_account_subjects(crb.subjects):
        result.add_dependent_by_ref(ref, Relationship.CLUSTER_ROLE_BINDING_SUBJECT)

    return result


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def event_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """The object an Event is about, addressed by UID."""
    if node.group == EVENTS_GROUP:
        regarding_uid = node.payload.get("regarding", "uid")
    else:
        regarding_uid = node.payload.get("involvedObject", "uid")

    result = RelationshipMap()
    if isinstance(regarding_uid, str) and regarding_uid:
        result.add_dependency_by_uid(regarding_uid, Relationship.EVENT_REGARDING)
    return result


_EXTRACTORS: dict[tuple[str, str], Extractor] = {
    ("", "Pod"): pod_relationships,
    ("", "Service"): service_relationships,
    (NETWORKING_GROUP, "Ingress"): ingress_relationships,
    (NETWORKING_GROUP, "IngressClass"): ingress_class_relationships,
    ("", "PersistentVolume"): pv_relationships,
    ("", "PersistentVolumeClaim"): pvc_relationships,
    (RBAC_GROUP, "RoleBinding"): role_binding_relationships,
    (RBAC_GROUP, "ClusterRoleBinding"): cluster_role_binding_relationships,
    (POLICY_GROUP, "PodDisruptionBudget"): pdb_relationships,
    ("", "Event"): event_relationships,
    (EVENTS_GROUP, "Event"): event_relationships,
}


def extract_relationships(node: Node, nodes_by_uid: NodeMap) -> RelationshipMap | None:
    """Dispatch to the extractor registered for the node's group and kind."""
    extractor = _EXTRACTORS.get((node.group, node.kind))
    if extractor is None:
        return None
    return extractor(node, nodes_by_uid)
