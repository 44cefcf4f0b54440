"""Tests for the HTTP backend."""

import pytest
from fastapi.testclient import TestClient

from autolayout import __version__
from autolayout_backend.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


GRAPH = {
    "nodes": [{"id": "a"}, {"id": "b", "width": 160, "height": 80}, {"id": "c"}],
    "connections": [{"source": "a", "target": "b"}, {"from": "a", "to": "c"}],
}


class TestHealth:

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}


class TestLayoutEndpoint:

    def test_auto_layout(self, client: TestClient) -> None:
        response = client.post("/api/layout", json=GRAPH)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["algorithm"] == "tree"
        assert set(data["node_positions"]) == {"a", "b", "c"}
        assert data["metrics"]["bounding_box"]["width"] > 0

    def test_layered_reports_crossings(self, client: TestClient) -> None:
        response = client.post("/api/layout", json={
            **GRAPH, "options": {"algorithm": "layered", "layered": {"direction": "LR"}},
        })
        assert response.status_code == 200
        assert response.json()["metrics"]["edge_crossings"] == 0

    def test_force_with_seed(self, client: TestClient) -> None:
        body = {**GRAPH, "options": {"algorithm": "force", "force": {"seed": 4, "iterations": 20}}}
        first = client.post("/api/layout", json=body).json()
        second = client.post("/api/layout", json=body).json()
        assert first["node_positions"] == second["node_positions"]

    def test_duplicate_ids_are_rejected(self, client: TestClient) -> None:
        response = client.post("/api/layout", json={"nodes": [{"id": "a"}, {"id": "a"}]})
        assert response.status_code == 400
        assert "Duplicate node id" in response.json()["detail"]

    def test_invalid_options_are_rejected(self, client: TestClient) -> None:
        response = client.post("/api/layout", json={**GRAPH, "options": {"algorithm": "spiral"}})
        assert response.status_code == 422

    def test_empty_graph(self, client: TestClient) -> None:
        response = client.post("/api/layout", json={})
        assert response.status_code == 200
        assert response.json()["node_positions"] == {}


class TestAnalyzeEndpoint:

    def test_analyze(self, client: TestClient) -> None:
        response = client.post("/api/analyze", json=GRAPH)
        assert response.status_code == 200
        data = response.json()
        assert data["characteristics"]["is_tree"] is True
        assert data["characteristics"]["edge_count"] == 2
        assert data["recommended_algorithm"] == "tree"

    def test_duplicate_ids_are_rejected(self, client: TestClient) -> None:
        response = client.post("/api/analyze", json={"nodes": [{"id": "a"}, {"id": "a"}]})
        assert response.status_code == 400


class TestValidateEndpoint:

    def test_validate(self, client: TestClient) -> None:
        response = client.post("/api/validate", json={
            "nodes": [{"id": "a"}],
            "connections": [{"source": "a", "target": "missing"}],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["warnings"] == 1
        assert data["summary"]["valid"] is True
        assert data["issues"][0]["type"] == "warning"

    def test_validate_reports_unknown_size_override(self, client: TestClient) -> None:
        response = client.post("/api/validate", json={
            **GRAPH,
            "options": {"node_sizes": {"ghost": {"width": 10, "height": 10}}},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["valid"] is True
        ghost = [i for i in data["issues"] if i.get("node_id") == "ghost"]
        assert ghost[0]["message"] == "Size override for unknown node: ghost"
