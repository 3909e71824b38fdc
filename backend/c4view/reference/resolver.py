import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set, TYPE_CHECKING

from c4view.ir.architecture import ArchitectureBody

if TYPE_CHECKING:
    from c4view.compiler.types import Graph

logger = logging.getLogger(__name__)

SELF_REFERENCE = "."


def resolve_node_id(reference: str, body: ArchitectureBody, known_ids: Set[str]) -> Optional[str]:
    """
    Map a possibly unqualified relation endpoint to a qualified node id.

    Precedence:
      1. the reference itself, if already a known id
      2. per system, in declaration order:
         `System.reference`, then a container named `reference`,
         then a component named `reference` (`System.Container.reference`)

    When several systems share a child name the first system declared wins.
    Returns None when nothing matches; callers drop the edge.
    """
    if reference in known_ids:
        return reference

    for system in body.systems:
        qualified = f"{system.id}.{reference}"
        if qualified in known_ids:
            return qualified

        for container in system.containers:
            if container.id == reference:
                return f"{system.id}.{reference}"
            for component in container.components:
                if component.id == reference:
                    return f"{system.id}.{container.id}.{reference}"

    return None


def qualify_scoped(reference: str, system_id: str, known_ids: Set[str]) -> Optional[str]:
    """Resolve an endpoint of a relation declared inside `system_id`."""
    if reference == SELF_REFERENCE:
        return system_id if system_id in known_ids else None

    qualified = f"{system_id}.{reference}"
    if qualified in known_ids:
        return qualified
    return None


def owning_system(node_id: str, graph: "Graph") -> Optional[str]:
    """Walk parent links up to the enclosing system, if any."""
    index = graph.index()
    node = index.get(node_id)
    seen: Set[str] = set()

    while node is not None and node.id not in seen:
        if node.type == "system":
            return node.id
        seen.add(node.id)
        node = index.get(node.parent) if node.parent else None

    return None


def top_level_id(node_id: str) -> str:
    return node_id.split(".", 1)[0]


def find_ambiguous_names(body: ArchitectureBody) -> Dict[str, List[str]]:
    """
    Short names (containers, components, datastores, queues) declared in more
    than one system. Resolution of such names picks the first system.
    """
    owners: Dict[str, List[str]] = defaultdict(list)

    for system in body.systems:
        names: Set[str] = set()
        for container in system.containers:
            names.add(container.id)
            names.update(c.id for c in container.components)
        names.update(c.id for c in system.components)
        names.update(d.id for d in system.datastores)
        names.update(q.id for q in system.queues)

        for name in names:
            owners[name].append(system.id)

    return {name: systems for name, systems in owners.items() if len(systems) > 1}
