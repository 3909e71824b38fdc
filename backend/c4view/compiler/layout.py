from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from c4view.compiler.types import Graph
from c4view.config import DEFAULT_LAYOUT_ENGINE, PRESET_PADDING
from c4view.ir.architecture import DocumentMetadata

KNOWN_LAYOUT_ENGINES = ("dagre", "cose", "fcose", "elk")

PRESET = "preset"
ALGORITHMIC = "algorithmic"


@dataclass
class LayoutPlan:
    mode: str  # preset | algorithmic
    engine: str
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_preset(self) -> bool:
        return self.mode == PRESET


def select_engine(requested: Optional[str]) -> str:
    if requested and requested in KNOWN_LAYOUT_ENGINES:
        return requested
    if DEFAULT_LAYOUT_ENGINE in KNOWN_LAYOUT_ENGINES:
        return DEFAULT_LAYOUT_ENGINE
    return "dagre"


def plan_layout(graph: Graph, metadata: Optional[DocumentMetadata]) -> LayoutPlan:
    """
    Stored positions are reused only when the document carries a layout map
    and at least one built node actually found its position in it.
    """
    has_layout = bool(metadata and metadata.layout)
    has_positions = any(n.position is not None for n in graph.nodes)

    if has_layout and has_positions:
        return LayoutPlan(
            mode=PRESET,
            engine=PRESET,
            options={
                "name": PRESET,
                "fit": True,
                "padding": PRESET_PADDING,
                "animate": True,
                "animationDuration": 500,
            },
        )

    engine = select_engine(metadata.layoutEngine if metadata else None)
    return LayoutPlan(
        mode=ALGORITHMIC,
        engine=engine,
        options={
            "name": engine,
            "rankDir": "TB",
            "nodeSep": 50,
            "rankSep": 100,
            "padding": PRESET_PADDING,
            "animate": True,
            "animationDuration": 500,
            "fit": True,
        },
    )
