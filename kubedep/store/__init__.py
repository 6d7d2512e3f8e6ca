"""Access to Kubernetes resources as plain dicts."""

from kubedep.store.base import (
    ListOptions,
    ResourceNotFoundError,
    ResourceStore,
    StoreError,
    UnsupportedKindError,
)
from kubedep.store.kubernetes import KubernetesResourceStore

__all__ = [
    "KubernetesResourceStore",
    "ListOptions",
    "ResourceNotFoundError",
    "ResourceStore",
    "StoreError",
    "UnsupportedKindError",
]
