"""Shared fixtures for kubedep integration tests.

Provides an in-memory store loaded with a small but complete application
(workload, networking, storage, RBAC, policy and events) so integration
tests can run full resolutions without touching a real cluster.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest

from kubedep.service import DependencyService
from tests import resources as r
from tests.resources import FakeStore

NAMESPACE = "shop"


def _shop_objects() -> list[dict[str, Any]]:
    worker = r.node(
        "worker-1",
        created=timedelta(days=30),
        status={"conditions": [{"type": "Ready", "status": "True", "reason": "KubeletReady"}]},
    )
    sa = r.service_account("web", NAMESPACE)
    config = r.config_map("web-config", NAMESPACE)
    env_secret = r.secret("web-env", NAMESPACE)
    tls = r.secret("web-tls", NAMESPACE)
    pull = r.secret("regcred", NAMESPACE)

    deploy = r.deployment("web", NAMESPACE, replicas=2, ready=2, created=timedelta(days=3))
    rs = r.replica_set(
        "web-5c8",
        NAMESPACE,
        owners=[r.owner_ref(deploy)],
        replicas=2,
        ready=2,
        created=timedelta(days=3),
    )
    pod_spec = {
        "containers": [
            {
                "name": "app",
                "image": "shop/web:1.4",
                "envFrom": [{"secretRef": {"name": "web-env"}}],
            }
        ],
        "imagePullSecrets": [{"name": "regcred"}],
        "volumes": [
            {"name": "config", "configMap": {"name": "web-config"}},
            {"name": "data", "persistentVolumeClaim": {"claimName": "web-data"}},
        ],
    }
    pods = [
        r.pod(
            f"web-5c8-{suffix}",
            NAMESPACE,
            node="worker-1",
            service_account="web",
            spec=pod_spec,
            status={"phase": "Running", "containerStatuses": [{"name": "app", "ready": True}]},
            labels={"app": "web", "tier": "frontend"},
            owners=[r.owner_ref(rs)],
            created=timedelta(hours=5),
        )
        for suffix in ("a", "b")
    ]
    worker_pod = r.pod("batch-1", NAMESPACE, labels={"app": "batch"})

    svc = r.service("web", NAMESPACE, selector={"app": "web"})
    ing = r.ingress(
        "web",
        NAMESPACE,
        spec={
            "ingressClassName": "nginx",
            "tls": [{"hosts": ["shop.example.com"], "secretName": "web-tls"}],
            "rules": [
                {
                    "host": "shop.example.com",
                    "http": {
                        "paths": [
                            {
                                "path": "/",
                                "pathType": "Prefix",
                                "backend": {"service": {"name": "web", "port": {"number": 80}}},
                            }
                        ]
                    },
                }
            ],
        },
    )
    nginx = r.ingress_class("nginx")

    claim = r.pvc("web-data", NAMESPACE, volume="pv-web-data")
    volume = r.pv("pv-web-data", claim=(NAMESPACE, "web-data"), storage_class="fast")
    fast = r.storage_class("fast")

    budget = r.pdb("web", NAMESPACE, selector={"matchLabels": {"app": "web"}})

    reader = r.role("web-reader", NAMESPACE)
    binding = r.role_binding("web-reader", NAMESPACE, role_name="web-reader", subjects=[(NAMESPACE, "web")])
    viewer = r.cluster_role("view")
    cluster_binding = r.cluster_role_binding("web-view", role_name="view", subjects=[(NAMESPACE, "web")])

    scheduled = r.core_event("web-5c8-a.17f0", pods[0], NAMESPACE)

    # Same names in another namespace must never leak into a shop resolution.
    other = [
        r.service("web", "staging", selector={"app": "web"}),
        r.pod("web-x", "staging", labels={"app": "web"}),
    ]

    return [
        worker,
        sa,
        config,
        env_secret,
        tls,
        pull,
        deploy,
        rs,
        *pods,
        worker_pod,
        svc,
        ing,
        nginx,
        claim,
        volume,
        fast,
        budget,
        reader,
        binding,
        viewer,
        cluster_binding,
        scheduled,
        *other,
    ]


@pytest.fixture
def store() -> FakeStore:
    """FakeStore holding the shop application."""
    return FakeStore(_shop_objects())


@pytest.fixture
def service(store: FakeStore) -> DependencyService:
    return DependencyService(store, fetch_timeout=1.0)
