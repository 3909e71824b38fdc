"""Tests for the C4 level projections."""

from c4view.compiler.projection import (
    build_component_graph,
    build_container_graph,
    build_system_context_graph,
    precompute_projections,
    project,
)
from c4view.compiler.types import Scope
from c4view.ir.architecture import ArchitectureBody, Relation


def _pairs(graph):
    return {(e.source, e.target) for e in graph.edges}


def test_context_view_rolls_relations_up(sample_body):
    graph = build_system_context_graph(sample_body)

    assert graph.node_ids() == {"User", "Sys1", "Sys2"}
    assert _pairs(graph) == {("User", "Sys1"), ("Sys1", "Sys2")}
    assert all(n.position is None for n in graph.nodes)


def test_context_view_keeps_first_label_per_pair(sample_body):
    sample_body.relations.append(Relation(**{"from": "User", "to": "Sys1.API", "label": "debugs"}))
    graph = build_system_context_graph(sample_body)

    user_edges = [e for e in graph.edges if e.source == "User"]
    assert len(user_edges) == 1
    assert user_edges[0].label == "uses"


def test_container_view(sample_body):
    graph = build_container_graph(sample_body, "Sys1")

    assert graph.node_ids() == {"User", "Sys1", "Sys2", "Sys1.API", "Sys1.Web", "Sys1.DB"}
    index = graph.index()
    assert index["Sys2"].external is True
    assert index["Sys1"].external is False
    assert "Sys1.API.Auth" not in index

    assert _pairs(graph) == {
        ("User", "Sys1.Web"),
        ("Sys1.API", "Sys2"),
        ("Sys1.API", "Sys1.DB"),
        ("Sys1.Web", "Sys1.API"),
    }


def test_container_view_of_unknown_system_is_empty(sample_body):
    graph = build_container_graph(sample_body, "Nope")
    assert graph.nodes == []
    assert graph.edges == []


def test_component_view_synthesizes_external_endpoints(sample_body):
    graph = build_component_graph(sample_body, "Sys1", "API")
    index = graph.index()

    assert set(index) == {"Sys1.API", "Sys1.API.Auth", "Sys1.API.Orders", "Sys2.Gateway"}
    assert index["Sys1.API"].parent is None
    assert index["Sys2.Gateway"].external is True
    assert index["Sys2.Gateway"].type == "container"
    assert index["Sys2.Gateway"].label == "Gateway"
    assert _pairs(graph) == {("Sys1.API.Orders", "Sys2.Gateway")}


def test_component_view_of_unknown_container_is_empty(sample_body):
    assert build_component_graph(sample_body, "Sys1", "Nope").nodes == []


def test_project_dispatches_by_scope(sample_body):
    assert project(sample_body).node_ids() == {"User", "Sys1", "Sys2"}
    assert project(sample_body, Scope(system_id="Sys1")) == build_container_graph(sample_body, "Sys1")

    qualified = project(sample_body, Scope(system_id="Sys1", container_id="Sys1.API"))
    short = project(sample_body, Scope(system_id="Sys1", container_id="API"))
    assert qualified == short


def test_precompute_covers_every_system_and_container(sample_body):
    projections = precompute_projections(sample_body)

    assert projections.system_context.node_ids() == {"User", "Sys1", "Sys2"}
    assert set(projections.containers) == {"Sys1", "Sys2"}
    assert set(projections.components) == {"Sys1.API", "Sys1.Web", "Sys2.Gateway"}
    assert projections.containers["Sys2"].get("Sys1").external is True


def test_scope_level_and_focus():
    assert Scope().level == "context"
    assert Scope(system_id="S").level == "container"
    assert Scope(system_id="S", container_id="C").level == "component"
    assert Scope(system_id="S", container_id="C").focus_id == "S.C"
    assert Scope(system_id="S", container_id="S.C").focus_id == "S.C"
    assert Scope().focus_id is None


def test_two_system_scenario():
    body = ArchitectureBody.model_validate({
        "systems": [
            {"id": "Sys1", "containers": [{"id": "API"}]},
            {"id": "Sys2", "containers": [{"id": "DB"}]},
        ],
        "relations": [{"from": "Sys1.API", "to": "Sys2.DB"}],
    })

    context = build_system_context_graph(body)
    assert context.node_ids() == {"Sys1", "Sys2"}
    assert _pairs(context) == {("Sys1", "Sys2")}

    containers = build_container_graph(body, "Sys1")
    # the scoped system stays as the compound parent of its containers
    assert containers.node_ids() == {"Sys1", "Sys1.API", "Sys2"}
    assert containers.get("Sys1.API").parent == "Sys1"
    assert containers.get("Sys2").external
    assert _pairs(containers) == {("Sys1.API", "Sys2")}
