"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from diagram_backend.main import app


@pytest.fixture
def client(workspace):
    return TestClient(app)


@pytest.fixture
def populated(client):
    client.post("/api/diagram/new", json={"file_path": "api.svg"})
    response = client.post("/api/nodes", json={
        "file_path": "api.svg",
        "nodes": [
            {"id": "svc", "title": "Service", "x": 100, "y": 150},
            {"id": "db", "title": "Database", "kind": "Cylinder"},
        ],
    })
    assert response.status_code == 200
    return client


class TestHealth:
    def test_health(self, client, workspace):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "workspace": str(workspace)}


class TestDiagramRoutes:
    """Test file creation and inspection."""

    def test_new_diagram(self, client, workspace):
        response = client.post("/api/diagram/new", json={"file_path": "n.svg"})
        assert response.status_code == 200
        assert response.json()["file_path"] == str(workspace / "n.svg")

    def test_get_diagram(self, populated):
        response = populated.get("/api/diagram", params={"file_path": "api.svg"})
        body = response.json()

        assert response.status_code == 200
        assert [n["id"] for n in body["diagram"]["nodes"]] == ["svc", "db"]
        assert body["summary"]["total_nodes"] == 2

    def test_bad_path(self, client):
        response = client.post("/api/diagram/new", json={"file_path": "../escape.svg"})
        assert response.status_code == 400
        assert "escapes the workspace" in response.json()["detail"]


class TestNodeRoutes:
    """Test node batches."""

    def test_unknown_kind(self, populated):
        response = populated.post("/api/nodes", json={
            "file_path": "api.svg", "nodes": [{"id": "x", "kind": "Blob"}],
        })
        assert response.status_code == 400
        assert "Unknown node kind: Blob" in response.json()["detail"]

    def test_bad_layout(self, populated):
        response = populated.post("/api/nodes", json={
            "file_path": "api.svg", "nodes": [{"id": "x"}], "layout": {"algorithm": "foo"},
        })
        assert response.status_code == 400
        assert "Unsupported layout algorithm: foo" in response.json()["detail"]

    def test_empty_batch_rejected(self, populated):
        response = populated.post("/api/nodes", json={"file_path": "api.svg", "nodes": []})
        assert response.status_code == 422

    def test_edit(self, populated):
        response = populated.patch("/api/nodes", json={
            "file_path": "api.svg", "nodes": [{"id": "svc", "y": 300}],
        })
        assert response.status_code == 200
        assert response.json()["edited"] == ["svc"]

    def test_edit_unknown_is_404(self, populated):
        response = populated.patch("/api/nodes", json={
            "file_path": "api.svg", "nodes": [{"id": "ghost", "title": "x"}],
        })
        assert response.status_code == 404
        assert response.json()["detail"] == "Node not found: ghost"

    def test_remove(self, populated):
        response = populated.post("/api/nodes/remove", json={"file_path": "api.svg", "ids": ["db", "nope"]})
        assert response.status_code == 200
        assert response.json()["removed"] == ["db"]
        assert response.json()["missing"] == ["nope"]


class TestEdgeRoutes:
    """Test edge batches."""

    def test_link(self, populated):
        response = populated.post("/api/edges", json={
            "file_path": "api.svg",
            "edges": [{"from": "svc", "to": "db", "title": "queries"}],
        })
        assert response.status_code == 200
        assert response.json()["edges"] == ["svc-2-db"]

    def test_link_missing_node(self, populated):
        response = populated.post("/api/edges", json={
            "file_path": "api.svg", "edges": [{"source": "svc", "target": "cache"}],
        })
        assert response.status_code == 404

    def test_unknown_edge_style(self, populated):
        response = populated.post("/api/edges", json={
            "file_path": "api.svg", "edges": [{"source": "svc", "target": "db", "edgeStyle": "zigzag"}],
        })
        assert response.status_code == 400
