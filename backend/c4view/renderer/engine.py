"""
Render engine boundary.

The viewer core only decides what to hand the engine and how to read its
state back. `RenderEngine` is the contract; `HeadlessRenderEngine` is an
in-process implementation that keeps the rendered graph in memory, places
nodes with a simple layered layout and reports completion asynchronously,
the way a browser engine fires `layoutstop`.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from c4view.ir.architecture import MetadataEntry
from c4view.renderer.surface import DrawingSurface
from c4view.visual.visual_schema import ElementDefinition, RenderedEdge, RenderedNode
from c4view.visual.visual_style import node_size

logger = logging.getLogger(__name__)

Handler = Callable[..., None]

LAYOUT_STOP = "layoutstop"
SELECT = "select"
UNSELECT = "unselect"
DRAG_END = "dragfree"


class RenderEngine(Protocol):
    def mount(self, elements: List[ElementDefinition], style: Dict[str, dict], layout_options: Dict[str, Any]):
        ...

    def run_layout(self):
        ...

    def fit(self, padding: float):
        ...

    def on(self, event: str, handler: Handler):
        ...

    def off(self, event: str, handler: Handler):
        ...

    def node(self, node_id: str) -> Optional[RenderedNode]:
        ...

    def nodes(self) -> List[RenderedNode]:
        ...

    def edges(self) -> List[RenderedEdge]:
        ...

    def add(self, element: ElementDefinition):
        ...

    def remove(self, element_id: str):
        ...

    def select(self, node_id: str):
        ...

    def unselect_all(self):
        ...

    def destroy(self):
        ...


class HeadlessRenderEngine:
    def __init__(self, surface: DrawingSurface):
        self.surface = surface
        self.style: Dict[str, dict] = {}
        self.layout_options: Dict[str, Any] = {}
        self.viewport: Tuple[float, float, float] = (1.0, 0.0, 0.0)  # zoom, pan x, pan y
        self.fit_count = 0
        self.destroyed = False
        self._nodes: Dict[str, RenderedNode] = {}
        self._edges: Dict[str, RenderedEdge] = {}
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    # ---------- elements ----------

    def mount(self, elements: List[ElementDefinition], style: Dict[str, dict], layout_options: Dict[str, Any]):
        self.style = style
        self.layout_options = dict(layout_options)
        for element in elements:
            self.add(element)

    def add(self, element: ElementDefinition):
        data = element.data
        if element.group == "edges":
            source, target = data["source"], data["target"]
            if source not in self._nodes or target not in self._nodes:
                logger.debug("Edge %s skipped: endpoint not rendered", data.get("id"))
                return
            edge_id = str(data.get("id") or f"{source}->{target}")
            self._edges[edge_id] = RenderedEdge(
                id=edge_id,
                source=source,
                target=target,
                label=str(data.get("label") or ""),
            )
            return

        node_type = str(data.get("type", "container"))
        width, height = node_size(node_type)
        style = self.style.get(node_type, {})
        node = RenderedNode(
            id=str(data["id"]),
            label=str(data.get("label") or data["id"]),
            node_type=node_type,
            parent=data.get("parent"),
            description=data.get("description"),
            technology=data.get("technology"),
            external=bool(data.get("external", False)),
            width=style.get("width", width),
            height=style.get("height", height),
            visible=not style.get("hidden", False),
        )
        node.metadata = _metadata_entries(data.get("metadata"))
        if element.position is not None:
            node.x = element.position["x"]
            node.y = element.position["y"]
        self._nodes[node.id] = node

    def remove(self, element_id: str):
        if element_id in self._nodes:
            del self._nodes[element_id]
            for edge_id in [e.id for e in self._edges.values() if element_id in (e.source, e.target)]:
                del self._edges[edge_id]
        else:
            self._edges.pop(element_id, None)

    def node(self, node_id: str) -> Optional[RenderedNode]:
        return self._nodes.get(node_id)

    def nodes(self) -> List[RenderedNode]:
        return list(self._nodes.values())

    def edges(self) -> List[RenderedEdge]:
        return list(self._edges.values())

    # ---------- events ----------

    def on(self, event: str, handler: Handler):
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler):
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def emit(self, event: str, *args):
        for handler in list(self._handlers[event]):
            handler(*args)

    def handler_count(self, event: str) -> int:
        return len(self._handlers[event])

    # ---------- layout ----------

    def run_layout(self):
        if self.layout_options.get("name") == "preset":
            self.emit(LAYOUT_STOP)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._place_layered()
            self.emit(LAYOUT_STOP)
            return

        loop.call_soon(self._finish_layout)

    def _finish_layout(self):
        if self.destroyed:
            return
        self._place_layered()
        self.emit(LAYOUT_STOP)

    def _place_layered(self):
        """Longest-path layering over edges; one row per rank."""
        node_sep = float(self.layout_options.get("nodeSep", 50))
        rank_sep = float(self.layout_options.get("rankSep", 100))

        rank = {node_id: 0 for node_id in self._nodes}
        # Bounded relaxation keeps cycles from looping forever
        for _ in range(len(self._nodes)):
            changed = False
            for edge in self._edges.values():
                if edge.source == edge.target:
                    continue
                if rank[edge.target] < rank[edge.source] + 1:
                    rank[edge.target] = rank[edge.source] + 1
                    changed = True
            if not changed:
                break

        rows: Dict[int, List[RenderedNode]] = defaultdict(list)
        for node in self._nodes.values():
            rows[rank[node.id]].append(node)

        y = 0.0
        for level in sorted(rows):
            row = rows[level]
            x = 0.0
            tallest = 0.0
            for node in row:
                node.x = x + node.width / 2
                node.y = y + node.height / 2
                x += node.width + node_sep
                tallest = max(tallest, node.height)
            y += tallest + rank_sep

    # ---------- viewport ----------

    def fit(self, padding: float):
        width, height = self.surface.size()
        shown = [n for n in self._nodes.values() if n.visible]
        self.fit_count += 1
        if not shown or width <= 0 or height <= 0:
            return

        x1 = min(n.x - n.width / 2 for n in shown)
        x2 = max(n.x + n.width / 2 for n in shown)
        y1 = min(n.y - n.height / 2 for n in shown)
        y2 = max(n.y + n.height / 2 for n in shown)

        avail_w = max(width - 2 * padding, 1.0)
        avail_h = max(height - 2 * padding, 1.0)
        zoom = min(avail_w / max(x2 - x1, 1.0), avail_h / max(y2 - y1, 1.0))
        zoom = min(max(zoom, 0.1), 3.0)
        self.viewport = (zoom, padding - x1 * zoom, padding - y1 * zoom)

    # ---------- user interaction ----------

    def select(self, node_id: str):
        node = self._nodes.get(node_id)
        if node is None:
            return
        for other in self._nodes.values():
            other.selected = False
        node.selected = True
        self.emit(SELECT, node_id)

    def unselect_all(self):
        had_selection = any(n.selected for n in self._nodes.values())
        for node in self._nodes.values():
            node.selected = False
        for edge in self._edges.values():
            edge.selected = False
        if had_selection:
            self.emit(UNSELECT, None)

    def drag(self, node_id: str, x: float, y: float):
        node = self._nodes.get(node_id)
        if node is None:
            return
        node.x, node.y = x, y
        self.emit(DRAG_END, node_id)

    def destroy(self):
        self.destroyed = True
        self._handlers.clear()
        self._nodes.clear()
        self._edges.clear()


def _metadata_entries(raw) -> list:
    return [MetadataEntry.model_validate(entry) for entry in raw or []]
