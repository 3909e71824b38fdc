"""
Graph -> document.

Rebuilds the nested architecture body from a (possibly edited) flat graph and
extracts the layout map. Endpoint spelling may differ from the original
document: relations owned by a system are written relative to it, everything
else uses absolute ids.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from c4view.compiler.types import Graph, Node
from c4view.ir.architecture import (
    ADR,
    ArchitectureBody,
    ArchitectureDocument,
    Component,
    Container,
    DataStore,
    DeploymentNode,
    DocumentMetadata,
    LayoutData,
    Person,
    Queue,
    Relation,
    Requirement,
    System,
)
from c4view.reference.resolver import SELF_REFERENCE, owning_system

logger = logging.getLogger(__name__)


@dataclass
class SerializedArchitecture:
    architecture: ArchitectureBody
    layout: Dict[str, LayoutData]


def extract_layout(graph: Graph) -> Dict[str, LayoutData]:
    layout: Dict[str, LayoutData] = {}
    for node in graph.nodes:
        if node.position is None:
            continue
        pos = node.position
        layout[node.id] = LayoutData(
            x=round(pos.x),
            y=round(pos.y),
            width=round(pos.width) if pos.width is not None else None,
            height=round(pos.height) if pos.height is not None else None,
        )
    return layout


def _strip(node_id: str, prefix: str) -> str:
    if node_id.startswith(prefix + "."):
        return node_id[len(prefix) + 1:]
    return node_id


def _label(node: Node, local_id: str) -> Optional[str]:
    # Labels equal to the id are implied by the format
    return node.label if node.label and node.label != local_id else None


# -------------------------
# Nodes
# -------------------------

def _serialize_nodes(graph: Graph, body: ArchitectureBody):
    index = graph.index()
    systems: Dict[str, System] = {}
    containers: Dict[str, Container] = {}

    def system_for(node: Node) -> Optional[System]:
        sys_id = owning_system(node.id, graph)
        return systems.get(sys_id) if sys_id else None

    # Parents first so children always find their holder
    def depth(node: Node) -> int:
        d, current, seen = 0, node, set()
        while current.parent and current.parent in index and current.id not in seen:
            seen.add(current.id)
            current = index[current.parent]
            d += 1
        return d

    for node in sorted(graph.nodes, key=depth):
        if node.type == "person":
            body.persons.append(
                Person(id=node.id, label=_label(node, node.id), description=node.description,
                       metadata=list(node.metadata))
            )

        elif node.type == "system":
            system = System(id=node.id, label=_label(node, node.id), description=node.description,
                            metadata=list(node.metadata))
            systems[node.id] = system
            body.systems.append(system)

        elif node.type == "container":
            owner = system_for(node)
            local_id = _strip(node.id, owner.id) if owner else node.id
            container = Container(
                id=local_id,
                label=_label(node, local_id),
                description=node.description,
                technology=node.technology,
                metadata=list(node.metadata),
            )
            containers[node.id] = container
            if owner:
                owner.containers.append(container)
            else:
                body.containers.append(container)

        elif node.type in ("datastore", "queue"):
            model = DataStore if node.type == "datastore" else Queue
            holder = containers.get(node.parent) if node.parent else None
            if holder is not None:
                local_id = _strip(node.id, node.parent)
                element = model(id=local_id, label=_label(node, local_id), metadata=list(node.metadata))
                if node.type == "datastore":
                    holder.datastores.append(element)
                else:
                    holder.queues.append(element)
                continue

            owner = system_for(node)
            local_id = _strip(node.id, owner.id) if owner else node.id
            element = model(id=local_id, label=_label(node, local_id), metadata=list(node.metadata))
            if owner is None:
                target = body.datastores if node.type == "datastore" else body.queues
            else:
                target = owner.datastores if node.type == "datastore" else owner.queues
            target.append(element)

        elif node.type == "component":
            holder = containers.get(node.parent) if node.parent else None
            if holder is not None:
                local_id = _strip(node.id, node.parent)
                holder.components.append(
                    Component(id=local_id, label=_label(node, local_id), description=node.description,
                              technology=node.technology, metadata=list(node.metadata))
                )
                continue

            owner = systems.get(node.parent) if node.parent else None
            if owner is not None:
                local_id = _strip(node.id, owner.id)
                owner.components.append(
                    Component(id=local_id, label=_label(node, local_id), description=node.description,
                              technology=node.technology, metadata=list(node.metadata))
                )
            else:
                logger.warning("Component %s has no container or system; not serialized", node.id)

        elif node.type == "requirement":
            body.requirements.append(
                Requirement(id=node.id, title=_label(node, node.id), description=node.description)
            )

        elif node.type == "adr":
            body.adrs.append(ADR(id=node.id, title=_label(node, node.id), decision=node.description))

        elif node.type == "deployment":
            body.deployment.append(DeploymentNode(id=node.id, label=_label(node, node.id)))

        else:
            logger.warning("Unknown node type %s for %s; not serialized", node.type, node.id)

    return systems


# -------------------------
# Relations
# -------------------------

def _serialize_relations(graph: Graph, body: ArchitectureBody, systems: Dict[str, System]):
    node_ids = graph.node_ids()

    for edge in graph.edges:
        sys_id = owning_system(edge.source, graph)
        label = edge.label or None

        system = systems.get(sys_id) if sys_id else None

        # Inside the system, an outside target would resolve to a same-named child
        shadowed = (
            system is not None
            and edge.target != sys_id
            and not edge.target.startswith(sys_id + ".")
            and f"{sys_id}.{edge.target}" in node_ids
        )

        if system is None or shadowed:
            body.relations.append(Relation(**{"from": edge.source, "to": edge.target, "label": label}))
            continue

        source = SELF_REFERENCE if edge.source == sys_id else _strip(edge.source, sys_id)
        if edge.target == sys_id:
            target = SELF_REFERENCE
        else:
            target = _strip(edge.target, sys_id)

        system.relations.append(Relation(**{"from": source, "to": target, "label": label}))


# ============================================================
# PUBLIC ENTRY POINTS
# ============================================================

def serialize_graph(graph: Graph) -> SerializedArchitecture:
    graph = graph.normalized()
    body = ArchitectureBody()

    systems = _serialize_nodes(graph, body)
    _serialize_relations(graph, body, systems)

    return SerializedArchitecture(architecture=body, layout=extract_layout(graph))


def to_document(graph: Graph, metadata: Optional[DocumentMetadata] = None) -> ArchitectureDocument:
    """Serialized graph with the layout merged into the document metadata."""
    result = serialize_graph(graph)
    merged = metadata.model_copy(deep=True) if metadata else DocumentMetadata()
    merged.layout = result.layout
    return ArchitectureDocument(metadata=merged, architecture=result.architecture)
