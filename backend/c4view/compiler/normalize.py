from typing import Callable, Dict, List, Optional

from c4view.compiler.types import Node, Position
from c4view.ir.architecture import (
    ArchitectureBody,
    Container,
    LayoutData,
    System,
)

PositionLookup = Callable[[str], Optional[Position]]


def position_lookup(layout: Optional[Dict[str, LayoutData]]) -> PositionLookup:
    layout = layout or {}

    def lookup(node_id: str) -> Optional[Position]:
        data = layout.get(node_id)
        if data is None:
            return None
        return Position(x=data.x, y=data.y, width=data.width, height=data.height)

    return lookup


def _no_position(node_id: str) -> Optional[Position]:
    return None


# -------------------------
# People
# -------------------------

def normalize_persons(body: ArchitectureBody, get_pos: PositionLookup = _no_position) -> List[Node]:
    return [
        Node(
            id=person.id,
            label=person.label or person.id,
            type="person",
            metadata=list(person.metadata),
            description=person.description,
            position=get_pos(person.id),
        )
        for person in body.persons
    ]


# -------------------------
# Systems (recursive)
# -------------------------

def _normalize_container(container: Container, parent: Optional[str], get_pos: PositionLookup) -> List[Node]:
    container_id = f"{parent}.{container.id}" if parent else container.id
    nodes = [
        Node(
            id=container_id,
            label=container.label or container.id,
            type="container",
            parent=parent,
            metadata=list(container.metadata),
            description=container.description,
            technology=container.technology,
            position=get_pos(container_id),
        )
    ]

    for component in container.components:
        comp_id = f"{container_id}.{component.id}"
        nodes.append(
            Node(
                id=comp_id,
                label=component.label or component.id,
                type="component",
                parent=container_id,
                metadata=list(component.metadata),
                description=component.description,
                technology=component.technology,
                position=get_pos(comp_id),
            )
        )

    for store in container.datastores:
        nodes.append(_leaf(store.id, store.label, "datastore", container_id, store.metadata, get_pos))
    for queue in container.queues:
        nodes.append(_leaf(queue.id, queue.label, "queue", container_id, queue.metadata, get_pos))

    return nodes


def _leaf(local_id, label, node_type, parent, metadata, get_pos: PositionLookup) -> Node:
    node_id = f"{parent}.{local_id}" if parent else local_id
    return Node(
        id=node_id,
        label=label or local_id,
        type=node_type,
        parent=parent,
        metadata=list(metadata),
        position=get_pos(node_id),
    )


def normalize_system(system: System, get_pos: PositionLookup = _no_position) -> List[Node]:
    nodes = [
        Node(
            id=system.id,
            label=system.label or system.id,
            type="system",
            metadata=list(system.metadata),
            description=system.description,
            position=get_pos(system.id),
        )
    ]

    for container in system.containers:
        nodes.extend(_normalize_container(container, system.id, get_pos))

    for component in system.components:
        comp_id = f"{system.id}.{component.id}"
        nodes.append(
            Node(
                id=comp_id,
                label=component.label or component.id,
                type="component",
                parent=system.id,
                metadata=list(component.metadata),
                description=component.description,
                technology=component.technology,
                position=get_pos(comp_id),
            )
        )

    for store in system.datastores:
        nodes.append(_leaf(store.id, store.label, "datastore", system.id, store.metadata, get_pos))
    for queue in system.queues:
        nodes.append(_leaf(queue.id, queue.label, "queue", system.id, queue.metadata, get_pos))

    return nodes


def normalize_systems(body: ArchitectureBody, get_pos: PositionLookup = _no_position) -> List[Node]:
    nodes: List[Node] = []
    for system in body.systems:
        nodes.extend(normalize_system(system, get_pos))
    return nodes


# -------------------------
# Loose top-level elements
# -------------------------

def normalize_loose_elements(body: ArchitectureBody, get_pos: PositionLookup = _no_position) -> List[Node]:
    nodes: List[Node] = []
    for container in body.containers:
        nodes.extend(_normalize_container(container, None, get_pos))
    for store in body.datastores:
        nodes.append(_leaf(store.id, store.label, "datastore", None, store.metadata, get_pos))
    for queue in body.queues:
        nodes.append(_leaf(queue.id, queue.label, "queue", None, queue.metadata, get_pos))
    return nodes


# -------------------------
# Governance & deployment
# -------------------------

def normalize_governance(body: ArchitectureBody, get_pos: PositionLookup = _no_position) -> List[Node]:
    nodes: List[Node] = []

    for req in body.requirements:
        nodes.append(
            Node(
                id=req.id,
                label=req.title or req.id,
                type="requirement",
                description=req.description,
                position=get_pos(req.id),
            )
        )

    for adr in body.adrs:
        nodes.append(
            Node(
                id=adr.id,
                label=adr.title or adr.id,
                type="adr",
                description=adr.decision,
                position=get_pos(adr.id),
            )
        )

    for dep in body.deployment:
        nodes.append(
            Node(
                id=dep.id,
                label=dep.label or dep.id,
                type="deployment",
                position=get_pos(dep.id),
            )
        )

    return nodes
