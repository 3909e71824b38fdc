"""Tests for the HTTP host."""

import pytest
from fastapi.testclient import TestClient

from c4view.main import app

from conftest import SAMPLE_NODE_IDS


@pytest.fixture()
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_graph(client, sample_dict):
    response = client.post("/graph", json={"document": sample_dict})
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "success"
    assert {n["id"] for n in data["graph"]["nodes"]} == SAMPLE_NODE_IDS
    assert len(data["graph"]["edges"]) == 4
    assert data["issues"] == []


def test_graph_reports_dropped_relations(client, sample_dict):
    sample_dict["architecture"]["relations"].append({"from": "User", "to": "Ghost"})
    data = client.post("/graph", json={"document": sample_dict}).json()

    assert data["status"] == "warning"
    assert data["issues"][0]["level"] == "edge"
    assert data["issues"][0]["object_id"] == "Ghost"


def test_projection(client, sample_dict):
    response = client.post("/projection", json={"document": sample_dict, "system_id": "Sys1"})
    assert response.status_code == 200

    graph = response.json()["graph"]
    assert graph["level"] == "container"
    assert {n["id"] for n in graph["nodes"]} == {"User", "Sys1", "Sys2", "Sys1.API", "Sys1.Web", "Sys1.DB"}


def test_context_projection_is_default(client, sample_dict):
    graph = client.post("/projection", json={"document": sample_dict}).json()["graph"]
    assert graph["level"] == "context"
    assert {(e["source"], e["target"]) for e in graph["edges"]} == {("User", "Sys1"), ("Sys1", "Sys2")}


@pytest.mark.parametrize("scope", [
    {"system_id": "Nope"},
    {"system_id": "Sys1", "container_id": "Nope"},
    {"container_id": "API"},
])
def test_unknown_scope_is_404(client, sample_dict, scope):
    response = client.post("/projection", json={"document": sample_dict, **scope})
    assert response.status_code == 404


def test_all_projections(client, sample_dict):
    data = client.post("/projections", json={"document": sample_dict}).json()

    assert set(data["containers"]) == {"Sys1", "Sys2"}
    assert set(data["components"]) == {"Sys1.API", "Sys1.Web", "Sys2.Gateway"}
    assert len(data["system_context"]["nodes"]) == 3


def test_layout_plan(client, sample_dict):
    plan = client.post("/layout-plan", json={"document": sample_dict}).json()["plan"]
    assert plan["mode"] == "algorithmic"

    sample_dict["metadata"]["layout"] = {"User": {"x": 0, "y": 0}}
    plan = client.post("/layout-plan", json={"document": sample_dict}).json()["plan"]
    assert plan["mode"] == "preset"


def test_serialize(client):
    payload = {
        "nodes": [
            {"id": "S", "type": "system", "position": {"x": 10.4, "y": 20.6}},
            {"id": "S.API", "label": "Public API", "type": "container", "parent": "S"},
            {"id": "U", "type": "person"},
        ],
        "edges": [{"source": "U", "target": "S.API", "label": "calls"}],
    }
    data = client.post("/serialize", json=payload).json()

    container = data["architecture"]["systems"][0]["containers"][0]
    assert (container["id"], container["label"]) == ("API", "Public API")
    assert "description" not in container
    assert data["architecture"]["relations"][0]["from"] == "U"
    assert data["layout"] == {"S": {"x": 10, "y": 21}}


def test_serialize_into_document(client):
    payload = {
        "nodes": [{"id": "U", "type": "person", "position": {"x": 1, "y": 2}}],
        "metadata": {"name": "Shop"},
    }
    document = client.post("/serialize", json=payload).json()["document"]

    assert document["metadata"]["name"] == "Shop"
    assert document["metadata"]["layout"] == {"U": {"x": 1, "y": 2}}
