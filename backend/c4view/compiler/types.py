from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Set

from c4view.ir.architecture import MetadataEntry


NODE_TYPES = (
    "person",
    "system",
    "container",
    "component",
    "datastore",
    "queue",
    "requirement",
    "adr",
    "deployment",
)


@dataclass
class Position:
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass
class Node:
    id: str
    label: str
    type: str  # one of NODE_TYPES
    parent: Optional[str] = None
    metadata: List[MetadataEntry] = field(default_factory=list)
    description: Optional[str] = None
    technology: Optional[str] = None
    position: Optional[Position] = None
    external: bool = False


@dataclass
class Edge:
    source: str
    target: str
    label: str = ""
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = f"{self.source}->{self.target}"


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def index(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def get(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def children_of(self, node_id: str) -> List[Node]:
        return [n for n in self.nodes if n.parent == node_id]

    def descendants_of(self, node_id: str) -> Iterator[Node]:
        stack = list(self.children_of(node_id))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(self.children_of(node.id))

    def normalized(self) -> "Graph":
        """
        Copy of the graph where parents missing from the node set are cleared
        and edges touching unknown nodes are dropped.
        """
        ids = self.node_ids()
        nodes = [
            n if n.parent is None or n.parent in ids else replace(n, parent=None)
            for n in self.nodes
        ]
        edges = [e for e in self.edges if e.source in ids and e.target in ids]
        return Graph(nodes=nodes, edges=edges)


@dataclass(frozen=True)
class Scope:
    system_id: Optional[str] = None
    container_id: Optional[str] = None

    @property
    def level(self) -> str:
        if self.system_id and self.container_id:
            return "component"
        if self.system_id:
            return "container"
        return "context"

    @property
    def focus_id(self) -> Optional[str]:
        # Container focus ids are qualified like every other node id
        if self.system_id and self.container_id:
            if self.container_id.startswith(self.system_id + "."):
                return self.container_id
            return f"{self.system_id}.{self.container_id}"
        return self.container_id or self.system_id
