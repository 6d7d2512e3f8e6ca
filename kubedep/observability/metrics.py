"""Prometheus metrics for dependency resolution."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

resolutions_total = Counter(
    "kubedep_resolutions_total",
    "Dependency resolutions by traversal direction and outcome",
    ["direction", "outcome"],
)

resolution_duration_seconds = Histogram(
    "kubedep_resolution_duration_seconds",
    "Wall time of a full resolution, fetch through render",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

kind_list_failures_total = Counter(
    "kubedep_kind_list_failures_total",
    "Per-kind list calls that failed or timed out during graph construction",
    ["kind"],
)

graph_nodes = Histogram(
    "kubedep_graph_nodes",
    "Number of nodes in a resolved result",
    buckets=(1, 2, 5, 10, 25, 50, 100, 250, 500, 1000),
)
