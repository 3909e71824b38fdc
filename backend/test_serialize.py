"""Tests for writing an (edited) graph back to the document format."""

from c4view.compiler.merge import build_graph, resolved_relation_set
from c4view.compiler.serialize import extract_layout, serialize_graph, to_document
from c4view.compiler.types import Edge, Graph, Node, Position
from c4view.ir.architecture import ArchitectureBody, DocumentMetadata


def test_relations_survive_a_round_trip(sample_body):
    result = serialize_graph(build_graph(sample_body))
    assert resolved_relation_set(result.architecture) == resolved_relation_set(sample_body)


def test_nesting_is_rebuilt(sample_body):
    body = serialize_graph(build_graph(sample_body)).architecture

    assert [p.id for p in body.persons] == ["User"]
    assert [s.id for s in body.systems] == ["Sys1", "Sys2"]

    sys1 = body.find_system("Sys1")
    assert [c.id for c in sys1.containers] == ["API", "Web"]
    assert [c.id for c in sys1.containers[0].components] == ["Auth", "Orders"]
    assert [d.id for d in sys1.datastores] == ["DB"]
    assert sys1.label == "Shop"
    assert sys1.containers[0].label is None
    assert sys1.containers[0].technology == "Go"
    assert sys1.containers[1].label == "Web App"


def test_relation_spelling(sample_body):
    body = serialize_graph(build_graph(sample_body)).architecture
    sys1 = body.find_system("Sys1")

    scoped = {(r.from_, r.to) for r in sys1.relations}
    assert ("API", "DB") in scoped
    assert ("API.Orders", "Sys2.Gateway") in scoped
    assert {(r.from_, r.to) for r in body.relations} == {("User", "Sys1.Web")}


def test_system_endpoint_is_written_as_self_reference():
    graph = Graph(
        nodes=[
            Node(id="S", label="S", type="system"),
            Node(id="S.DB", label="DB", type="datastore", parent="S"),
        ],
        edges=[Edge(source="S", target="S.DB", label="owns")],
    )
    body = serialize_graph(graph).architecture
    relation = body.systems[0].relations[0]

    assert (relation.from_, relation.to, relation.label) == (".", "DB", "owns")


def test_children_listed_before_parents_still_nest():
    graph = Graph(nodes=[
        Node(id="S.API.Auth", label="Auth", type="component", parent="S.API"),
        Node(id="S.API", label="API", type="container", parent="S"),
        Node(id="S", label="S", type="system"),
    ])
    body = serialize_graph(graph).architecture
    assert body.systems[0].containers[0].components[0].id == "Auth"


def test_container_level_stores_stay_in_their_container():
    graph = Graph(nodes=[
        Node(id="S", label="S", type="system"),
        Node(id="S.API", label="API", type="container", parent="S"),
        Node(id="S.API.Cache", label="Cache", type="queue", parent="S.API"),
    ])
    container = serialize_graph(graph).architecture.systems[0].containers[0]
    assert [q.id for q in container.queues] == ["Cache"]


def test_system_components():
    graph = Graph(nodes=[
        Node(id="S", label="S", type="system"),
        Node(id="S.Lib", label="Lib", type="component", parent="S"),
    ])
    system = serialize_graph(graph).architecture.systems[0]
    assert [c.id for c in system.components] == ["Lib"]


def test_governance_nodes_are_top_level():
    graph = Graph(nodes=[
        Node(id="R1", label="Be fast", type="requirement"),
        Node(id="ADR1", label="Use Go", type="adr", description="Go everywhere"),
        Node(id="prod", label="prod", type="deployment"),
    ])
    body = serialize_graph(graph).architecture

    assert body.requirements[0].title == "Be fast"
    assert body.adrs[0].decision == "Go everywhere"
    assert body.deployment[0].id == "prod"


def test_layout_is_rounded():
    graph = Graph(nodes=[
        Node(id="A", label="A", type="person", position=Position(x=10.6, y=-3.2, width=120.4, height=79.9)),
        Node(id="B", label="B", type="person"),
    ])
    layout = extract_layout(graph)

    assert set(layout) == {"A"}
    assert (layout["A"].x, layout["A"].y, layout["A"].width, layout["A"].height) == (11, -3, 120, 80)


def test_dangling_edges_are_not_written():
    graph = Graph(
        nodes=[Node(id="A", label="A", type="person")],
        edges=[Edge(source="A", target="Gone")],
    )
    assert serialize_graph(graph).architecture.relations == []


def test_to_document_merges_layout_into_metadata():
    graph = Graph(nodes=[Node(id="A", label="A", type="person", position=Position(x=1, y=2))])
    base = DocumentMetadata(name="Shop", version="2.0")
    document = to_document(graph, base)

    assert document.metadata.name == "Shop"
    assert document.metadata.layout["A"].x == 1
    assert base.layout == {}
    assert document.to_json_dict()["architecture"]["persons"] == [{"id": "A", "metadata": []}]


def test_outside_target_shadowed_by_a_child_round_trips():
    body = ArchitectureBody.model_validate({
        "persons": [{"id": "Admin"}],
        "systems": [{"id": "Sys", "containers": [{"id": "API"}, {"id": "Admin"}]}],
        "relations": [{"from": "Sys.API", "to": "Admin"}],
    })
    assert resolved_relation_set(body) == {("Sys.API", "Admin")}

    result = serialize_graph(build_graph(body))

    assert resolved_relation_set(result.architecture) == {("Sys.API", "Admin")}
    assert {(r.from_, r.to) for r in result.architecture.relations} == {("Sys.API", "Admin")}
    assert result.architecture.find_system("Sys").relations == []
