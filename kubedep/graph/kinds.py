"""Typed views over the resource fields the relationship extractors read.

Each model decodes only the subset of a kind's schema that carries
references to other resources. Unknown fields are ignored; a field of the
wrong type fails validation, which the extractors treat as "no
relationships" for that resource.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _K8sModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls decode the same as omitted fields.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ObjectMeta(_K8sModel):
    name: str = ""
    namespace: str = ""
    uid: str = ""


class NamedRef(_K8sModel):
    """Any ``{name: ...}`` reference (LocalObjectReference and friends)."""

    name: str = ""


# ---------------------------------------------------------------------------
# Pod
# ---------------------------------------------------------------------------


class SecretVolumeSource(_K8sModel):
    secret_name: str = ""


class PVCVolumeSource(_K8sModel):
    claim_name: str = ""


class VolumeProjection(_K8sModel):
    config_map: NamedRef | None = None
    secret: NamedRef | None = None


class ProjectedVolumeSource(_K8sModel):
    sources: list[VolumeProjection] = Field(default_factory=list)


class Volume(_K8sModel):
    name: str = ""
    config_map: NamedRef | None = None
    secret: SecretVolumeSource | None = None
    persistent_volume_claim: PVCVolumeSource | None = None
    projected: ProjectedVolumeSource | None = None


class EnvFromSource(_K8sModel):
    config_map_ref: NamedRef | None = None
    secret_ref: NamedRef | None = None


class EnvVarSource(_K8sModel):
    config_map_key_ref: NamedRef | None = None
    secret_key_ref: NamedRef | None = None


class EnvVar(_K8sModel):
    name: str = ""
    value_from: EnvVarSource | None = None


class Container(_K8sModel):
    name: str = ""
    env_from: list[EnvFromSource] = Field(default_factory=list)
    env: list[EnvVar] = Field(default_factory=list)


class PodSpec(_K8sModel):
    node_name: str = ""
    service_account_name: str = ""
    image_pull_secrets: list[NamedRef] = Field(default_factory=list)
    volumes: list[Volume] = Field(default_factory=list)
    init_containers: list[Container] = Field(default_factory=list)
    containers: list[Container] = Field(default_factory=list)


class Pod(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodSpec = Field(default_factory=PodSpec)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ServiceSpec(_K8sModel):
    selector: dict[str, str] | None = None


class Service(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: ServiceSpec = Field(default_factory=ServiceSpec)


# ---------------------------------------------------------------------------
# Ingress & IngressClass
# ---------------------------------------------------------------------------


class IngressServiceBackend(_K8sModel):
    name: str = ""


class IngressBackend(_K8sModel):
    service: IngressServiceBackend | None = None


class HTTPIngressPath(_K8sModel):
    path: str = ""
    backend: IngressBackend = Field(default_factory=IngressBackend)


class HTTPIngressRuleValue(_K8sModel):
    paths: list[HTTPIngressPath] = Field(default_factory=list)


class IngressRule(_K8sModel):
    host: str = ""
    http: HTTPIngressRuleValue | None = None


class IngressTLS(_K8sModel):
    hosts: list[str] = Field(default_factory=list)
    secret_name: str = ""


class IngressSpec(_K8sModel):
    ingress_class_name: str | None = None
    default_backend: IngressBackend | None = None
    rules: list[IngressRule] = Field(default_factory=list)
    tls: list[IngressTLS] = Field(default_factory=list)


class Ingress(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: IngressSpec = Field(default_factory=IngressSpec)


class IngressClassParameters(_K8sModel):
    api_group: str | None = None
    kind: str = ""
    name: str = ""
    namespace: str | None = None
    scope: str | None = None


class IngressClassSpec(_K8sModel):
    controller: str = ""
    parameters: IngressClassParameters | None = None


class IngressClass(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: IngressClassSpec = Field(default_factory=IngressClassSpec)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class ClaimRef(_K8sModel):
    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""


class PersistentVolumeSpec(_K8sModel):
    claim_ref: ClaimRef | None = None
    storage_class_name: str = ""


class PersistentVolume(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PersistentVolumeSpec = Field(default_factory=PersistentVolumeSpec)


class PersistentVolumeClaimSpec(_K8sModel):
    volume_name: str = ""
    storage_class_name: str | None = None


class PersistentVolumeClaim(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PersistentVolumeClaimSpec = Field(default_factory=PersistentVolumeClaimSpec)


# ---------------------------------------------------------------------------
# RBAC
# ---------------------------------------------------------------------------


class RoleRef(_K8sModel):
    api_group: str = ""
    kind: str = ""
    name: str = ""


class Subject(_K8sModel):
    kind: str = ""
    api_group: str = ""
    name: str = ""
    namespace: str = ""


class RoleBinding(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    role_ref: RoleRef = Field(default_factory=RoleRef)
    subjects: list[Subject] = Field(default_factory=list)


class ClusterRoleBinding(RoleBinding):
    pass


# ---------------------------------------------------------------------------
# PodDisruptionBudget
# ---------------------------------------------------------------------------


class LabelSelectorRequirement(_K8sModel):
    key: str
    operator: str
    values: list[str] = Field(default_factory=list)


class LabelSelector(_K8sModel):
    match_labels: dict[str, str] | None = None
    match_expressions: list[LabelSelectorRequirement] | None = None


class PodDisruptionBudgetSpec(_K8sModel):
    selector: LabelSelector | None = None


class PodDisruptionBudget(_K8sModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: PodDisruptionBudgetSpec = Field(default_factory=PodDisruptionBudgetSpec)


M = TypeVar("M", bound=_K8sModel)


def decode(model: type[M], content: dict[str, Any]) -> M:
    """Validate *content* into *model*; raises pydantic.ValidationError."""
    return model.model_validate(content)
