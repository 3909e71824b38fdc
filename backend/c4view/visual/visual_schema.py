from typing import Dict, List, Optional, Set
from dataclasses import dataclass, field

from c4view.ir.architecture import MetadataEntry


@dataclass
class ElementDefinition:
    """What the render engine is handed for one node or edge."""
    group: str                               # nodes | edges
    data: Dict[str, object]
    position: Optional[Dict[str, float]] = None


@dataclass
class RenderedNode:
    id: str
    label: str
    node_type: str
    parent: Optional[str] = None
    metadata: List[MetadataEntry] = field(default_factory=list)
    description: Optional[str] = None
    technology: Optional[str] = None
    external: bool = False
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    collapsed: bool = False
    visible: bool = True
    opacity: float = 1.0
    selected: bool = False
    classes: Set[str] = field(default_factory=set)


@dataclass
class RenderedEdge:
    id: str
    source: str
    target: str
    label: str = ""
    opacity: float = 1.0
    selected: bool = False
