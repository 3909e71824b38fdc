from typing import Dict, List

from c4view.compiler.types import Edge, Graph, Node, Position
from c4view.visual.visual_schema import ElementDefinition, RenderedEdge, RenderedNode


def node_to_element(node: Node) -> ElementDefinition:
    data: Dict[str, object] = {
        "id": node.id,
        "label": node.label,
        "type": node.type,
        "metadata": [entry.model_dump(exclude_none=True) for entry in node.metadata],
    }
    if node.parent:
        data["parent"] = node.parent
    if node.description:
        data["description"] = node.description
    if node.technology:
        data["technology"] = node.technology
    if node.external:
        data["external"] = True

    position = None
    if node.position is not None:
        position = {"x": node.position.x, "y": node.position.y}

    return ElementDefinition(group="nodes", data=data, position=position)


def edge_to_element(edge: Edge) -> ElementDefinition:
    return ElementDefinition(
        group="edges",
        data={
            "id": edge.id,
            "source": edge.source,
            "target": edge.target,
            "label": edge.label,
        },
    )


def to_elements(graph: Graph) -> List[ElementDefinition]:
    """
    Transform a built graph into render-engine element definitions.
    Nodes come first so every edge endpoint already exists when it is added.
    """
    graph = graph.normalized()
    return [
        *(node_to_element(n) for n in graph.nodes),
        *(edge_to_element(e) for e in graph.edges),
    ]


def from_rendered(nodes: List[RenderedNode], edges: List[RenderedEdge]) -> Graph:
    """Read the current rendered state back into a graph snapshot."""
    return Graph(
        nodes=[
            Node(
                id=n.id,
                label=n.label,
                type=n.node_type,
                parent=n.parent,
                metadata=list(n.metadata),
                description=n.description,
                technology=n.technology,
                position=Position(x=n.x, y=n.y, width=n.width, height=n.height),
                external=n.external,
            )
            for n in nodes
        ],
        edges=[Edge(source=e.source, target=e.target, label=e.label, id=e.id) for e in edges],
    )
