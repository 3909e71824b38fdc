"""
C4 level projections.

Each level is derived from the full graph of the document:
- context:   persons + systems, every relation rolled up to top-level entities
- container: one system expanded into containers / datastores / queues,
             other systems collapsed and marked external
- component: one container expanded into components, with the far end of
             every touching relation synthesized as an external node

Projections never depend on each other and can be computed in any order.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Set, Tuple

from c4view.compiler.merge import ResolvedRelation, build_nodes, make_edges, resolve_relations
from c4view.compiler.types import Graph, Node, Scope
from c4view.ir.architecture import ArchitectureBody

logger = logging.getLogger(__name__)


@dataclass
class PrecomputedProjections:
    system_context: Graph
    containers: Dict[str, Graph] = field(default_factory=dict)
    components: Dict[str, Graph] = field(default_factory=dict)


# ============================================================
# Helpers
# ============================================================

def _full_hierarchy(body: ArchitectureBody) -> Tuple[Dict[str, Node], List[ResolvedRelation]]:
    nodes = build_nodes(body)
    index = {n.id: n for n in nodes}
    return index, resolve_relations(body, set(index))


def roll_up(node_id: str, index: Dict[str, Node], visible: Set[str]) -> Optional[str]:
    """Nearest visible ancestor-or-self of `node_id`, or None."""
    current = index.get(node_id)
    seen: Set[str] = set()

    while current is not None and current.id not in seen:
        if current.id in visible:
            return current.id
        seen.add(current.id)
        current = index.get(current.parent) if current.parent else None

    return None


def _rolled_up_edges(
    relations: Iterable[ResolvedRelation],
    index: Dict[str, Node],
    visible: Set[str],
):
    """
    Roll both endpoints up, drop self-loops and keep the first label seen for
    each (from, to) pair.
    """
    seen_pairs: Set[Tuple[str, str]] = set()
    rolled: List[ResolvedRelation] = []

    for rel in relations:
        source = roll_up(rel.source, index, visible)
        target = roll_up(rel.target, index, visible)

        if source is None or target is None or source == target:
            continue

        key = (source, target)
        if key in seen_pairs:
            continue
        seen_pairs.add(key)
        rolled.append(ResolvedRelation(source, target, rel.label))

    return make_edges(rolled)


def _collapsed(node: Node, **changes) -> Node:
    # Projection nodes never carry stored positions; the view lays itself out
    return replace(node, position=None, **changes)


def infer_node_type(node_id: str, body: ArchitectureBody) -> str:
    if any(p.id == node_id for p in body.persons):
        return "person"
    if any(s.id == node_id for s in body.systems):
        return "system"

    parts = node_id.split(".")
    if len(parts) == 2:
        system = body.find_system(parts[0])
        if system is not None:
            if any(c.id == parts[1] for c in system.containers):
                return "container"
            if any(d.id == parts[1] for d in system.datastores):
                return "datastore"
            if any(q.id == parts[1] for q in system.queues):
                return "queue"
            if any(c.id == parts[1] for c in system.components):
                return "component"
    if len(parts) == 3:
        return "component"

    return "system"


def node_label(node_id: str, body: ArchitectureBody) -> str:
    for person in body.persons:
        if person.id == node_id:
            return person.label or person.id

    for system in body.systems:
        if system.id == node_id:
            return system.label or system.id
        for container in system.containers:
            container_id = f"{system.id}.{container.id}"
            if container_id == node_id:
                return container.label or container.id
            for comp in container.components:
                if f"{container_id}.{comp.id}" == node_id:
                    return comp.label or comp.id
        for element in [*system.datastores, *system.queues, *system.components]:
            if f"{system.id}.{element.id}" == node_id:
                return element.label or element.id

    return node_id.split(".")[-1]


# ============================================================
# L1: System Context
# ============================================================

def build_system_context_graph(body: ArchitectureBody) -> Graph:
    index, relations = _full_hierarchy(body)

    nodes = [
        _collapsed(n)
        for n in index.values()
        if n.parent is None and n.type in ("person", "system")
    ]
    visible = {n.id for n in nodes}

    return Graph(nodes=nodes, edges=_rolled_up_edges(relations, index, visible))


# ============================================================
# L2: Container view
# ============================================================

def build_container_graph(body: ArchitectureBody, system_id: str) -> Graph:
    if body.find_system(system_id) is None:
        logger.debug("Container view requested for unknown system %s", system_id)
        return Graph()

    index, relations = _full_hierarchy(body)
    nodes: List[Node] = []

    for node in index.values():
        if node.parent is None and node.type == "person":
            nodes.append(_collapsed(node))
        elif node.parent is None and node.type == "system":
            if node.id == system_id:
                nodes.append(_collapsed(node))
            else:
                nodes.append(_collapsed(node, external=True))
        elif node.parent == system_id and node.type in ("container", "datastore", "queue"):
            nodes.append(_collapsed(node))

    visible = {n.id for n in nodes}
    return Graph(nodes=nodes, edges=_rolled_up_edges(relations, index, visible))


# ============================================================
# L3: Component view
# ============================================================

def build_component_graph(body: ArchitectureBody, system_id: str, container_id: str) -> Graph:
    system = body.find_system(system_id)
    container = None
    if system is not None:
        container = next((c for c in system.containers if c.id == container_id), None)
    if container is None:
        logger.debug("Component view requested for unknown container %s.%s", system_id, container_id)
        return Graph()

    full_container_id = f"{system_id}.{container_id}"
    index, relations = _full_hierarchy(body)

    nodes: List[Node] = [_collapsed(index[full_container_id], parent=None)]
    components: Set[str] = set()
    for node in index.values():
        if node.parent == full_container_id and node.type == "component":
            nodes.append(_collapsed(node))
            components.add(node.id)

    node_ids = {n.id for n in nodes}
    kept: List[ResolvedRelation] = []

    for rel in relations:
        source_inside = rel.source in components
        target_inside = rel.target in components
        if not (source_inside or target_inside):
            continue

        other = rel.target if source_inside else rel.source
        if other not in node_ids:
            node_ids.add(other)
            nodes.append(
                Node(
                    id=other,
                    label=node_label(other, body),
                    type=infer_node_type(other, body),
                    external=True,
                )
            )
        kept.append(rel)

    return Graph(nodes=nodes, edges=make_edges(kept))


# ============================================================
# PUBLIC ENTRY POINTS
# ============================================================

def project(body: ArchitectureBody, scope: Optional[Scope] = None) -> Graph:
    scope = scope or Scope()

    if scope.level == "component":
        container_id = scope.container_id
        prefix = f"{scope.system_id}."
        if container_id.startswith(prefix):
            container_id = container_id[len(prefix):]
        return build_component_graph(body, scope.system_id, container_id)

    if scope.level == "container":
        return build_container_graph(body, scope.system_id)

    return build_system_context_graph(body)


def precompute_projections(body: ArchitectureBody) -> PrecomputedProjections:
    result = PrecomputedProjections(system_context=build_system_context_graph(body))

    for system in body.systems:
        result.containers[system.id] = build_container_graph(body, system.id)
        for container in system.containers:
            key = f"{system.id}.{container.id}"
            result.components[key] = build_component_graph(body, system.id, container.id)

    return result
