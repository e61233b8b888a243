"""Tests for the workflow graph HTTP API."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from workflow_graph.app.main import app, get_store
from workflow_graph.orchestrator import SessionStore


@pytest.fixture
def client():
    store = SessionStore()
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_chain(client: TestClient, **extra) -> dict:
    response = client.post("/sessions", json={
        "tasks": [
            {"id": "a", "title": "Plan", "section": "s1"},
            {"id": "b", "title": "Build", "section": "s1", "dependencies": ["a"]},
            {"id": "c", "title": "Ship", "section": "s2", "dependencies": ["b"]},
        ],
        "sections": [{"id": "s1", "title": "Now"}, {"id": "s2", "title": "Later"}],
        **extra,
    })
    assert response.status_code == 201
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_and_get_session(client):
    snapshot = create_chain(client)

    assert snapshot["critical_path"] == ["a", "b", "c"]
    assert snapshot["layout_strategy"] == "leveling"
    assert snapshot["auto_layout"] is True
    assert [n["id"] for n in snapshot["nodes"]] == ["a", "b", "c"]
    assert snapshot["nodes"][1]["position"] == {"x": 400.0, "y": 0.0}
    assert snapshot["edges"][0]["type"] == "finish-to-start"

    fetched = client.get(f"/sessions/{snapshot['session_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["session_id"] == snapshot["session_id"]


def test_create_session_with_options(client):
    snapshot = create_chain(client, strategy="sections", autoLayout=True)

    positions = {n["id"]: n["position"] for n in snapshot["nodes"]}
    assert positions["c"] == {"x": 0.0, "y": 400.0}
    assert snapshot["layout_strategy"] == "sections"


def test_connect_and_reject(client):
    session_id = create_chain(client)["session_id"]

    accepted = client.post(f"/sessions/{session_id}/dependencies", json={"source": "a", "target": "c"})
    assert accepted.status_code == 201
    assert accepted.json()["source"] == "a"

    cycle = client.post(f"/sessions/{session_id}/dependencies", json={"source": "c", "target": "a"})
    assert cycle.status_code == 409
    assert cycle.json()["detail"] == {"reason": "would create a cycle"}

    duplicate = client.post(f"/sessions/{session_id}/dependencies", json={"source": "a", "target": "c"})
    assert duplicate.json()["detail"] == {"reason": "duplicate dependency"}

    unknown = client.post(f"/sessions/{session_id}/dependencies", json={"source": "a", "target": "z"})
    assert unknown.status_code == 409
    assert unknown.json()["detail"] == {"reason": "unknown task"}


def test_retype_and_disconnect(client):
    snapshot = create_chain(client)
    session_id = snapshot["session_id"]
    edge_id = snapshot["edges"][0]["id"]

    retyped = client.post(f"/sessions/{session_id}/dependencies/{edge_id}/retype")
    assert retyped.status_code == 200
    assert retyped.json()["type"] == "start-to-start"

    deleted = client.delete(f"/sessions/{session_id}/dependencies/{edge_id}")
    assert deleted.status_code == 204

    missing = client.delete(f"/sessions/{session_id}/dependencies/{edge_id}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == {"reason": "unknown dependency"}

    path = client.get(f"/sessions/{session_id}/critical-path").json()
    assert path["path"] == ["b", "c"]
    assert [(e["source"], e["target"]) for e in path["edges"]] == [("b", "c")]


def test_update_dependency_type_and_lag(client):
    snapshot = create_chain(client)
    session_id = snapshot["session_id"]
    edge_id = snapshot["edges"][1]["id"]

    updated = client.patch(
        f"/sessions/{session_id}/dependencies/{edge_id}",
        json={"type": "finish-to-finish", "lag": 3},
    )
    assert updated.status_code == 200
    assert updated.json()["type"] == "finish-to-finish"
    assert updated.json()["lag"] == 3

    lag_only = client.patch(f"/sessions/{session_id}/dependencies/{edge_id}", json={"lag": -1})
    assert lag_only.json()["type"] == "finish-to-finish"
    assert lag_only.json()["lag"] == -1

    missing = client.patch(f"/sessions/{session_id}/dependencies/nope", json={"lag": 1})
    assert missing.status_code == 404

    bad_type = client.patch(f"/sessions/{session_id}/dependencies/{edge_id}", json={"type": "sideways"})
    assert bad_type.status_code == 422


def test_layout_endpoint(client):
    session_id = create_chain(client)["session_id"]

    response = client.post(f"/sessions/{session_id}/layout", json={"direction": "TB", "strategy": "layered"})

    assert response.status_code == 200
    body = response.json()
    assert body["layout_strategy"] == "layered"
    assert {n["target_position"] for n in body["nodes"]} == {"top"}
    assert {n["source_position"] for n in body["nodes"]} == {"bottom"}

    bad_strategy = client.post(f"/sessions/{session_id}/layout", json={"strategy": "radial"})
    assert bad_strategy.status_code == 422

    bad_direction = client.post(f"/sessions/{session_id}/layout", json={"direction": "diagonal"})
    assert bad_direction.status_code == 422


def test_integrity_endpoint(client):
    session_id = create_chain(client)["session_id"]
    client.post(f"/sessions/{session_id}/dependencies", json={"source": "a", "target": "c"})

    report = client.get(f"/sessions/{session_id}/integrity").json()

    assert report["valid"] is True
    assert report["warnings"] == ["Edge exists but not reflected in task dependencies: a-c"]


def test_unknown_session_and_delete(client):
    assert client.get("/sessions/nope").status_code == 404
    assert client.post("/sessions/nope/dependencies", json={"source": "a", "target": "b"}).status_code == 404

    session_id = create_chain(client)["session_id"]
    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.get(f"/sessions/{session_id}").status_code == 404


def test_settings_build_layout_options():
    from workflow_graph.app.config import Settings
    from workflow_graph.layout import Direction

    custom = Settings(layout_direction="TB", node_width=120, rank_sep=30)
    options = custom.layout_options()

    assert options.direction == Direction.TB
    assert options.node_width == 120
    assert options.rank_sep == 30
    assert options.node_height == 200
