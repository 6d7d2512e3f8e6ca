"""Tests for the kubedep REST API.

Covers the happy path, the error envelope for every failure class, and
hypothesis fuzzing of the request body to check that malformed input never
produces a 500.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from hypothesis import given, settings
from hypothesis import strategies as st

from kubedep import __version__
from kubedep.api.app import create_app
from kubedep.graph.builder import ResolutionError
from kubedep.params import Direction, OutputFormat
from kubedep.store.base import ResourceNotFoundError, StoreError, UnsupportedKindError

_BODY = {"cluster": "c-1", "kind": "deployment", "namespace": "default", "name": "web"}


def _make_service(output: str = "TREE", error: Exception | None = None) -> MagicMock:
    service = MagicMock()
    service.describe = AsyncMock(return_value=output, side_effect=error)
    return service


def _make_client(service: MagicMock | None = None) -> TestClient:
    return TestClient(create_app(service=service or _make_service()), raise_server_exceptions=False)


def _resolution_error(cause: Exception | None) -> ResolutionError:
    exc = ResolutionError("failed to get root resource deployment/web")
    exc.__cause__ = cause
    return exc


def _assert_error(resp, status: int, error: str) -> None:  # type: ignore[no-untyped-def]
    assert resp.status_code == status, resp.text
    assert resp.headers["content-type"].startswith("application/json")
    body = resp.json()
    assert body["error"] == error
    assert "detail" in body


class TestHealth:
    def test_health(self) -> None:
        resp = _make_client().get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


class TestDependencies:
    def test_tree_by_default(self) -> None:
        service = _make_service("NAMESPACE NAME\n")
        resp = _make_client(service).post("/api/v1/dependencies", json=_BODY)
        assert resp.status_code == 200
        assert resp.json() == {"format": "tree", "output": "NAMESPACE NAME\n"}

        request = service.describe.await_args.args[0]
        assert request.kind == "deployment"
        assert request.namespace == "default"
        assert request.direction is Direction.DEPENDENTS
        assert request.depth == 10

    def test_json_dependencies(self) -> None:
        service = _make_service("{}")
        body = {**_BODY, "direction": "dependencies", "depth": 3, "format": "json"}
        resp = _make_client(service).post("/api/v1/dependencies", json=body)
        assert resp.json() == {"format": "json", "output": "{}"}
        request = service.describe.await_args.args[0]
        assert request.dependencies is True
        assert request.depth == 3
        assert request.format is OutputFormat.JSON

    def test_out_of_range_depth_uses_default(self) -> None:
        service = _make_service()
        _make_client(service).post("/api/v1/dependencies", json={**_BODY, "depth": 99})
        assert service.describe.await_args.args[0].depth == 10

    def test_missing_name_is_400(self) -> None:
        service = _make_service()
        body = {k: v for k, v in _BODY.items() if k != "name"}
        resp = _make_client(service).post("/api/v1/dependencies", json=body)
        _assert_error(resp, 400, "INVALID_PARAMETER")
        assert "name" in resp.json()["detail"]
        service.describe.assert_not_awaited()

    def test_bad_direction_is_400(self) -> None:
        resp = _make_client().post("/api/v1/dependencies", json={**_BODY, "direction": "up"})
        _assert_error(resp, 400, "INVALID_PARAMETER")

    def test_non_integer_depth_is_400(self) -> None:
        resp = _make_client().post("/api/v1/dependencies", json={**_BODY, "depth": "deep"})
        _assert_error(resp, 400, "INVALID_REQUEST")
        assert resp.json()["detail"].startswith("depth")

    def test_root_not_found_is_404(self) -> None:
        error = _resolution_error(ResourceNotFoundError("Deployment", "default", "web"))
        resp = _make_client(_make_service(error=error)).post("/api/v1/dependencies", json=_BODY)
        _assert_error(resp, 404, "RESOURCE_NOT_FOUND")

    def test_unsupported_kind_is_400(self) -> None:
        error = _resolution_error(UnsupportedKindError("widget"))
        resp = _make_client(_make_service(error=error)).post("/api/v1/dependencies", json=_BODY)
        _assert_error(resp, 400, "UNSUPPORTED_KIND")
        assert "widget" in resp.json()["detail"]

    def test_store_failure_is_500(self) -> None:
        error = _resolution_error(StoreError("connect to cluster 'c-1': refused"))
        resp = _make_client(_make_service(error=error)).post("/api/v1/dependencies", json=_BODY)
        _assert_error(resp, 500, "RESOLUTION_FAILED")

    def test_unexpected_error_hides_details(self) -> None:
        resp = _make_client(_make_service(error=RuntimeError("secret internals"))).post(
            "/api/v1/dependencies", json=_BODY
        )
        _assert_error(resp, 500, "INTERNAL_ERROR")
        assert "secret internals" not in resp.text

    def test_non_object_body_is_400(self) -> None:
        resp = _make_client().post(
            "/api/v1/dependencies",
            content=b"[]",
            headers={"content-type": "application/json"},
        )
        _assert_error(resp, 400, "INVALID_REQUEST")


def test_metrics_endpoint() -> None:
    resp = _make_client().get("/metrics/")
    assert resp.status_code == 200
    assert "kubedep_resolutions_total" in resp.text
    assert "kubedep_kind_list_failures_total" in resp.text


_text = st.text(alphabet=st.characters(codec="utf-8", exclude_categories=("Cs",)), max_size=80)


@given(
    body=st.fixed_dictionaries(
        {},
        optional={
            "cluster": _text,
            "kind": _text,
            "name": _text,
            "namespace": _text,
            "direction": _text,
            "format": _text,
            "depth": st.one_of(st.integers(), st.text(max_size=5), st.none()),
        },
    )
)
@settings(max_examples=75, deadline=None)
def test_fuzzed_bodies_never_500(body: dict) -> None:  # type: ignore[type-arg]
    resp = _make_client().post("/api/v1/dependencies", json=body)
    assert resp.status_code in {200, 400}
    assert resp.headers["content-type"].startswith("application/json")
    if resp.status_code == 400:
        assert set(resp.json()) == {"error", "detail"}
