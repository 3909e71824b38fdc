import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from c4view.compiler.normalize import (
    normalize_governance,
    normalize_loose_elements,
    normalize_persons,
    normalize_systems,
    position_lookup,
)
from c4view.compiler.types import Edge, Graph, Node
from c4view.ir.architecture import ArchitectureBody, LayoutData, Relation
from c4view.ir.validation import BuildReport
from c4view.reference.resolver import (
    SELF_REFERENCE,
    find_ambiguous_names,
    resolve_node_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRelation:
    source: str
    target: str
    label: str


def build_nodes(body: ArchitectureBody, layout: Optional[Dict[str, LayoutData]] = None) -> List[Node]:
    get_pos = position_lookup(layout)
    nodes: List[Node] = []
    nodes.extend(normalize_persons(body, get_pos))
    nodes.extend(normalize_systems(body, get_pos))
    nodes.extend(normalize_loose_elements(body, get_pos))
    nodes.extend(normalize_governance(body, get_pos))
    return nodes


def _resolve_scoped(
    reference: str,
    scopes: Sequence[str],
    body: ArchitectureBody,
    known_ids: Set[str],
) -> Optional[str]:
    """
    Endpoint of a relation nested inside an element. `scopes` lists the
    enclosing qualified ids from innermost to the owning system.
    """
    if reference == SELF_REFERENCE:
        return scopes[0] if scopes[0] in known_ids else None

    for scope in scopes:
        qualified = f"{scope}.{reference}"
        if qualified in known_ids:
            return qualified

    # Absolute ids and references into other systems
    return resolve_node_id(reference, body, known_ids)


def _scoped_relation_groups(body: ArchitectureBody) -> Iterable[tuple]:
    for system in body.systems:
        yield [system.id], system.relations
        for component in system.components:
            yield [f"{system.id}.{component.id}", system.id], component.relations
        for container in system.containers:
            container_id = f"{system.id}.{container.id}"
            yield [container_id, system.id], container.relations
            for component in container.components:
                yield [f"{container_id}.{component.id}", container_id, system.id], component.relations


def resolve_relations(
    body: ArchitectureBody,
    known_ids: Set[str],
    report: Optional[BuildReport] = None,
) -> List[ResolvedRelation]:
    """
    Every relation of the document with both endpoints mapped to known ids,
    top-level relations first, then scoped ones in declaration order.
    Unresolvable relations are dropped.
    """
    resolved: List[ResolvedRelation] = []

    def _keep(relation: Relation, source: Optional[str], target: Optional[str]):
        if source is None or target is None:
            logger.debug("Dropping relation %s -> %s: unresolved endpoint", relation.from_, relation.to)
            if report is not None:
                report.add(
                    level="edge",
                    message=f"unresolved relation {relation.from_} -> {relation.to}",
                    object_id=relation.from_ if source is None else relation.to,
                )
            return
        resolved.append(ResolvedRelation(source, target, relation.display_label))

    for relation in body.relations:
        _keep(
            relation,
            resolve_node_id(relation.from_, body, known_ids),
            resolve_node_id(relation.to, body, known_ids),
        )

    for scopes, relations in _scoped_relation_groups(body):
        for relation in relations:
            _keep(
                relation,
                _resolve_scoped(relation.from_, scopes, body, known_ids),
                _resolve_scoped(relation.to, scopes, body, known_ids),
            )

    return resolved


def make_edges(relations: Iterable[ResolvedRelation]) -> List[Edge]:
    edges: List[Edge] = []
    used_ids: Set[str] = set()

    for rel in relations:
        base = f"{rel.source}->{rel.target}"
        edge_id = base
        counter = 2
        while edge_id in used_ids:
            edge_id = f"{base}-{counter}"
            counter += 1
        used_ids.add(edge_id)
        edges.append(Edge(source=rel.source, target=rel.target, label=rel.label, id=edge_id))

    return edges


def build_graph(
    body: ArchitectureBody,
    layout: Optional[Dict[str, LayoutData]] = None,
    report: Optional[BuildReport] = None,
) -> Graph:
    """
    Flatten the whole hierarchy into qualified nodes and resolved edges.
    Pure: the body is not modified and no state survives the call.
    """
    nodes = build_nodes(body, layout)

    # ids must exist before any relation is resolved
    known_ids = {n.id for n in nodes}

    if len(known_ids) != len(nodes):
        seen: Set[str] = set()
        unique: List[Node] = []
        for node in nodes:
            if node.id in seen:
                logger.warning("Duplicate node id %s ignored", node.id)
                if report is not None:
                    report.add(level="node", message="duplicate node id", object_id=node.id)
                continue
            seen.add(node.id)
            unique.append(node)
        nodes = unique

    ambiguous = find_ambiguous_names(body)
    for name, systems in ambiguous.items():
        logger.debug("Short name %s is declared in %s; resolving to %s", name, systems, systems[0])

    edges = make_edges(resolve_relations(body, known_ids, report))
    return Graph(nodes=nodes, edges=edges)


def resolved_relation_set(body: ArchitectureBody) -> Set[Tuple[str, str]]:
    """(source, target) pairs of every resolvable relation, spelling-independent."""
    known_ids = {n.id for n in build_nodes(body)}
    return {(r.source, r.target) for r in resolve_relations(body, known_ids)}
