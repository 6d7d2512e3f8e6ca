"""Resource store backed by kubernetes-asyncio's dynamic client."""

from __future__ import annotations

import asyncio
from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio.dynamic import DynamicClient  # type: ignore[import-untyped]
from kubernetes_asyncio.dynamic.exceptions import (  # type: ignore[import-untyped]
    DynamicApiError,
    NotFoundError,
)
from kubernetes_asyncio.dynamic.exceptions import (
    ResourceNotFoundError as DiscoveryNotFoundError,
)

from kubedep.models.config import KubernetesConfig
from kubedep.observability.logging import get_logger
from kubedep.store import kinds
from kubedep.store.base import ListOptions, ResourceNotFoundError, StoreError, UnsupportedKindError

_logger = get_logger("store.kubernetes")


class KubernetesResourceStore:
    """ResourceStore over one DynamicClient per cluster.

    Clients are created on first use and kept until :meth:`close`. How a
    cluster id maps to a connection is decided by :class:`KubernetesConfig`.
    """

    def __init__(self, config: KubernetesConfig) -> None:
        self._config = config
        self._clients: dict[str, tuple[Any, Any]] = {}
        self._connect_locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # ResourceStore
    # ------------------------------------------------------------------

    async def get(self, cluster: str, kind: str, namespace: str, name: str) -> dict[str, Any]:
        dyn = await self._dynamic(cluster)
        resource = await self._resource(dyn, cluster, kind)
        ns = namespace if resource.namespaced else None
        try:
            obj = await dyn.get(resource, name=name, namespace=ns)
        except NotFoundError as exc:
            raise ResourceNotFoundError(kind, namespace, name) from exc
        except DynamicApiError as exc:
            raise StoreError(f"get {kind} {namespace}/{name} on cluster {cluster!r}: {exc}") from exc
        return obj.to_dict()  # type: ignore[no-any-return]

    async def list(
        self,
        cluster: str,
        kind: str,
        namespace: str = "",
        options: ListOptions | None = None,
    ) -> list[dict[str, Any]]:
        dyn = await self._dynamic(cluster)
        resource = await self._resource(dyn, cluster, kind)
        ns = namespace if resource.namespaced and namespace else None

        params: dict[str, Any] = {}
        if options is not None:
            if options.label_selector:
                params["label_selector"] = options.label_selector
            if options.field_selector:
                params["field_selector"] = options.field_selector
            if options.limit > 0:
                params["limit"] = options.limit

        try:
            listed = await dyn.get(resource, namespace=ns, **params)
        except DynamicApiError as exc:
            raise StoreError(f"list {kind} on cluster {cluster!r}: {exc}") from exc

        # List responses carry apiVersion and kind on the list, not the items.
        items = []
        for item in listed.to_dict().get("items") or []:
            item.setdefault("apiVersion", resource.group_version)
            item.setdefault("kind", resource.kind)
            items.append(item)
        return items

    async def close(self) -> None:
        """Close every API client opened so far."""
        clients = list(self._clients.items())
        self._clients.clear()
        for cluster, (api, _) in clients:
            try:
                await api.close()
            except Exception as exc:
                _logger.warning("api_client_close_failed", cluster=cluster, error=str(exc))

    # ------------------------------------------------------------------
    # Kind resolution
    # ------------------------------------------------------------------

    async def _resource(self, dyn: Any, cluster: str, kind: str) -> Any:
        info = kinds.lookup(kind)
        if info is not None:
            try:
                return await dyn.resources.get(api_version=info.api_version, kind=info.kind)
            except DiscoveryNotFoundError as exc:
                raise UnsupportedKindError(kind, f"{info.api_version} is not served by cluster {cluster!r}") from exc

        dotted = kinds.split_dotted(kind)
        if dotted is None:
            raise UnsupportedKindError(kind)
        return await self._discover(dyn, cluster, kind, *dotted)

    async def _discover(self, dyn: Any, cluster: str, kind: str, resource_name: str, group: str) -> Any:
        """Find ``resource.group`` by singular or plural name in the preferred version."""
        candidates = []
        for attr in ("singular_name", "name"):
            candidates = await dyn.resources.search(group=group, **{attr: resource_name})
            candidates = [r for r in candidates if "/" not in r.name]
            if candidates:
                break
        if not candidates:
            raise UnsupportedKindError(kind, f"resource {resource_name} not found in group {group}")

        preferred = [r for r in candidates if r.preferred]
        resource = (preferred or candidates)[0]
        _logger.debug(
            "kind_discovered",
            cluster=cluster,
            kind=kind,
            api_version=resource.group_version,
            resolved_kind=resource.kind,
        )
        return resource

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    async def _dynamic(self, cluster: str) -> Any:
        entry = self._clients.get(cluster)
        if entry is not None:
            return entry[1]
        # Connects are serialised per cluster, not store-wide.
        lock = self._connect_locks.setdefault(cluster, asyncio.Lock())
        async with lock:
            entry = self._clients.get(cluster)
            if entry is None:
                try:
                    entry = await self._connect(cluster)
                except StoreError:
                    raise
                except Exception as exc:
                    raise StoreError(f"connect to cluster {cluster!r}: {exc}") from exc
                self._clients[cluster] = entry
                _logger.info("cluster_client_created", cluster=cluster, mode=self._mode())
        return entry[1]

    def _mode(self) -> str:
        if self._config.rancher_url:
            return "rancher"
        if self._config.in_cluster:
            return "in_cluster"
        return "kubeconfig"

    async def _connect(self, cluster: str) -> tuple[Any, Any]:
        """Open an ApiClient for *cluster* and wrap it in a DynamicClient."""
        cfg = self._config
        if cfg.rancher_url:
            if not cluster:
                raise StoreError("a cluster id is required when using the Rancher proxy")
            configuration = k8s_client.Configuration()
            configuration.host = f"{cfg.rancher_url}/k8s/clusters/{cluster}"
            configuration.verify_ssl = not cfg.rancher_insecure
            if cfg.rancher_token:
                configuration.api_key = {"authorization": cfg.rancher_token}
                configuration.api_key_prefix = {"authorization": "Bearer"}
            api = k8s_client.ApiClient(configuration=configuration)
        elif cfg.in_cluster:
            configuration = k8s_client.Configuration()
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config(client_configuration=configuration)
            api = k8s_client.ApiClient(configuration=configuration)
        else:
            api = await k8s_config.new_client_from_config(
                config_file=cfg.kubeconfig or None,
                context=cluster or None,
            )

        try:
            dyn = await DynamicClient(api)
        except Exception:
            await api.close()
            raise
        return api, dyn
