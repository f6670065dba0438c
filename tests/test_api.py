"""
Tests for the REST API routes.

Uses FastAPI TestClient against a real TaskMapSession with a temp vault.
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from tasks_map.api.app import create_app
from tasks_map.persistence import SnapshotFile
from tasks_map.session import TaskMapSession
from tasks_map.store import VaultStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()

    (vault / "TASKS.md").write_text(
        "---\nproject: Home\n---\n"
        "- [ ] Buy groceries 🆔 tsk001 #errand\n"
        "- [ ] Call dentist ⛔ tsk001\n"
        "- [x] File taxes 🆔 tsk003\n",
        encoding="utf-8",
    )
    return vault


@pytest.fixture
def client_with_vault(tmp_path):
    vault = _make_vault(tmp_path)
    session = TaskMapSession(VaultStore(vault), SnapshotFile(tmp_path / "data.json"))
    asyncio.run(session.load())
    with TestClient(create_app(session)) as client:
        yield client, vault


@pytest.fixture
def client(client_with_vault):
    return client_with_vault[0]


# ---------------------------------------------------------------------------
# Graph endpoints
# ---------------------------------------------------------------------------

class TestGraphEndpoints:
    def test_empty_graph(self, client):
        resp = client.get("/api/graph")
        assert resp.status_code == 200
        data = resp.json()
        assert data["nodes"] == []
        assert data["viewport"] == {"x": 0, "y": 0, "zoom": 1}

    def test_rebuild(self, client):
        resp = client.post("/api/graph/rebuild")
        assert resp.status_code == 200
        data = resp.json()
        assert {n["id"] for n in data["nodes"]} == {"tsk001", "TASKS.md:4", "tsk003"}
        assert [e["id"] for e in data["edges"]] == ["tsk001-TASKS.md:4"]
        node = next(n for n in data["nodes"] if n["id"] == "tsk001")
        assert node["data"]["task"]["tags"] == ["errand"]
        assert node["data"]["displayConfig"]["layoutDirection"] == "Horizontal"

    def test_refresh(self, client):
        resp = client.post("/api/graph/refresh")
        assert resp.status_code == 200
        assert resp.json() == {"tasks": 3, "nodes": 0}

    def test_save(self, client_with_vault, tmp_path):
        client, _ = client_with_vault
        resp = client.post("/api/graph/save")
        assert resp.json()["saved"] is True
        assert (tmp_path / "data.json").exists()

    def test_viewport(self, client):
        resp = client.put("/api/viewport", json={"x": 10, "y": -5, "zoom": 2})
        assert resp.json() == {"x": 10, "y": -5, "zoom": 2}
        assert client.get("/api/graph").json()["viewport"]["zoom"] == 2


# ---------------------------------------------------------------------------
# Node and edge endpoints
# ---------------------------------------------------------------------------

class TestNodeEndpoints:
    def test_add_node(self, client):
        resp = client.post("/api/nodes", json={"task_id": "tsk001", "x": 10, "y": 20})
        assert resp.status_code == 201
        assert resp.json()["position"] == {"x": 10, "y": 20}

    def test_add_node_twice(self, client):
        client.post("/api/nodes", json={"task_id": "tsk001"})
        resp = client.post("/api/nodes", json={"task_id": "tsk001"})
        assert resp.status_code == 400

    def test_add_unknown_node(self, client):
        resp = client.post("/api/nodes", json={"task_id": "nope"})
        assert resp.status_code == 404

    def test_add_node_with_task_data(self, client):
        resp = client.post(
            "/api/nodes",
            json={"task_id": "ghost1", "task_data": {"id": "ghost1", "text": "Gone"}},
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["task"]["text"] == "Gone"

    def test_move_and_delete(self, client):
        client.post("/api/nodes", json={"task_id": "tsk001"})
        resp = client.patch("/api/nodes", json={"node_id": "tsk001", "x": 1, "y": 2})
        assert resp.json()["position"] == {"x": 1, "y": 2}
        assert client.delete("/api/nodes", params={"node_id": "tsk001"}).status_code == 200
        assert client.delete("/api/nodes", params={"node_id": "tsk001"}).status_code == 404

    def test_connect_and_delete_edge(self, client):
        resp = client.post("/api/edges", json={"source": "tsk003", "target": "tsk001"})
        assert resp.status_code == 201
        assert resp.json()["id"] == "tsk003-tsk001"
        assert client.delete("/api/edges", params={"edge_id": "tsk003-tsk001"}).status_code == 200
        assert client.delete("/api/edges", params={"edge_id": "tsk003-tsk001"}).status_code == 404

    def test_connect_unknown(self, client):
        resp = client.post("/api/edges", json={"source": "nope", "target": "tsk001"})
        assert resp.status_code == 404


class TestLinkEndpoints:
    def test_link_writes_marker(self, client_with_vault):
        client, vault = client_with_vault
        resp = client.post("/api/links", json={"source": "tsk003", "target": "tsk001"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["linked"] is True
        assert data["edge"]["id"] == "tsk003-tsk001"
        text = (vault / "TASKS.md").read_text(encoding="utf-8")
        assert "- [ ] Buy groceries 🆔 tsk001 #errand ⛔ tsk003\n" in text

    def test_unlink_removes_marker(self, client_with_vault):
        client, vault = client_with_vault
        client.post("/api/graph/rebuild")
        resp = client.delete("/api/links", params={"edge_id": "tsk001-TASKS.md:4"})
        assert resp.json() == {"unlinked": True, "edge_id": "tsk001-TASKS.md:4"}
        assert "- [ ] Call dentist\n" in (vault / "TASKS.md").read_text(encoding="utf-8")

    def test_link_unknown(self, client):
        resp = client.post("/api/links", json={"source": "nope", "target": "tsk001"})
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Task endpoints
# ---------------------------------------------------------------------------

class TestTaskEndpoints:
    def test_get_task(self, client):
        resp = client.get("/api/task", params={"task_id": "tsk001"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"] == "Buy groceries"
        assert data["on_canvas"] is False

    def test_get_task_not_found(self, client):
        assert client.get("/api/task", params={"task_id": "nope"}).status_code == 404

    def test_set_status(self, client_with_vault):
        client, vault = client_with_vault
        resp = client.post("/api/task/status", json={"task_id": "tsk001", "status": "in_progress"})
        assert resp.status_code == 200
        assert resp.json()["changed"] is True
        assert resp.json()["task"]["status"] == "in_progress"
        assert "- [/] Buy groceries" in (vault / "TASKS.md").read_text(encoding="utf-8")

    def test_set_invalid_status(self, client):
        resp = client.post("/api/task/status", json={"task_id": "tsk001", "status": "nope"})
        assert resp.status_code == 400

    def test_set_status_not_found(self, client):
        resp = client.post("/api/task/status", json={"task_id": "nope", "status": "done"})
        assert resp.status_code == 404

    def test_tags(self, client_with_vault):
        client, vault = client_with_vault
        resp = client.post("/api/task/tags", json={"task_id": "tsk003", "tag": "paperwork"})
        assert resp.json()["task"]["tags"] == ["paperwork"]
        assert client.post("/api/task/tags", json={"task_id": "tsk003", "tag": "a b"}).status_code == 400
        resp = client.delete("/api/task/tags", params={"task_id": "tsk001", "tag": "errand"})
        assert resp.json()["task"]["tags"] == []
        text = (vault / "TASKS.md").read_text(encoding="utf-8")
        assert "#errand" not in text
        assert "File taxes 🆔 tsk003 #paperwork" in text

    def test_star(self, client):
        resp = client.post("/api/task/star", json={"task_id": "tsk001"})
        assert resp.json()["task"]["starred"] is True


# ---------------------------------------------------------------------------
# Query endpoints
# ---------------------------------------------------------------------------

class TestQueryEndpoints:
    def test_tags(self, client):
        assert client.get("/api/tags").json() == {"tags": ["errand"]}

    def test_sidebar(self, client):
        data = client.get("/api/sidebar", params={"project": "Home"}).json()
        assert len(data) == 3
        client.post("/api/nodes", json={"task_id": "tsk001"})
        data = client.get("/api/sidebar", params={"hide_on_canvas": "true"}).json()
        assert {t["id"] for t in data} == {"TASKS.md:4", "tsk003"}

    def test_projects(self, client):
        assert client.get("/api/projects").json() == {"projects": ["Home"]}

    def test_settings(self, client):
        assert client.get("/api/settings").json()["linking_style"] == "csv"
