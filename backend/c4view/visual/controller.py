import logging
from typing import Dict, List, Optional, Set

from c4view.compiler.types import Scope
from c4view.config import DIM_OPACITY
from c4view.renderer.engine import RenderEngine
from c4view.visual.visual_schema import RenderedNode
from c4view.visual.visual_style import style_for

logger = logging.getLogger(__name__)

COLLAPSED_CLASS = "collapsed"


class ViewController:
    """
    Progressive disclosure and focus dimming on top of a rendered graph.

    Each node keeps its own `collapsed` flag. Visibility is derived from the
    flags: a node is hidden when any ancestor is collapsed, so expanding a
    node never overrides a collapsed node further down.
    All operations are synchronous and idempotent.
    """

    def __init__(self, engine: RenderEngine, dim_opacity: float = DIM_OPACITY):
        self.engine = engine
        self.dim_opacity = dim_opacity
        self.focus: Optional[Scope] = None

    # ---------- helpers ----------

    def _index(self) -> Dict[str, RenderedNode]:
        return {n.id: n for n in self.engine.nodes()}

    def _children(self, node_id: str) -> List[RenderedNode]:
        return [n for n in self.engine.nodes() if n.parent == node_id]

    def descendants(self, node_id: str) -> List[RenderedNode]:
        found: List[RenderedNode] = []
        seen: Set[str] = {node_id}
        stack = self._children(node_id)
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            found.append(node)
            stack.extend(self._children(node.id))
        return found

    def _hidden_by_ancestor(self, node: RenderedNode, index: Dict[str, RenderedNode]) -> bool:
        seen: Set[str] = set()
        parent_id = node.parent
        while parent_id and parent_id in index and parent_id not in seen:
            seen.add(parent_id)
            parent = index[parent_id]
            if parent.collapsed:
                return True
            parent_id = parent.parent
        return False

    def _refresh_visibility(self, nodes: List[RenderedNode]):
        index = self._index()
        for node in nodes:
            node.visible = (
                not style_for(node.node_type).get("hidden", False)
                and not self._hidden_by_ancestor(node, index)
            )

    # ---------- collapse / expand ----------

    def collapse(self, node_id: str) -> bool:
        node = self.engine.node(node_id)
        if node is None:
            logger.debug("collapse: unknown node %s", node_id)
            return False
        node.collapsed = True
        node.classes.add(COLLAPSED_CLASS)
        self._refresh_visibility(self.descendants(node_id))
        return True

    def expand(self, node_id: str) -> bool:
        node = self.engine.node(node_id)
        if node is None:
            logger.debug("expand: unknown node %s", node_id)
            return False
        node.collapsed = False
        node.classes.discard(COLLAPSED_CLASS)
        self._refresh_visibility(self.descendants(node_id))
        return True

    def toggle(self, node_id: str) -> bool:
        """Flip a compound node. Leaf nodes have nothing to hide and are left alone."""
        node = self.engine.node(node_id)
        if node is None or not self._children(node_id):
            return False
        if node.collapsed:
            return self.expand(node_id)
        return self.collapse(node_id)

    def collapse_by_type(self, node_type: str):
        for node in self.engine.nodes():
            if node.node_type == node_type:
                self.collapse(node.id)

    def expand_by_type(self, node_type: str):
        for node in self.engine.nodes():
            if node.node_type == node_type:
                self.expand(node.id)

    def expand_ancestors(self, node_id: str):
        index = self._index()
        node = index.get(node_id)
        seen: Set[str] = set()
        while node is not None and node.parent and node.parent not in seen:
            seen.add(node.parent)
            parent = index.get(node.parent)
            if parent is not None and parent.collapsed:
                self.expand(parent.id)
            node = parent

    def is_collapsed(self, node_id: str) -> bool:
        node = self.engine.node(node_id)
        return bool(node and node.collapsed)

    def is_visible(self, node_id: str) -> bool:
        node = self.engine.node(node_id)
        return bool(node and node.visible)

    def set_level(self, level: int):
        """1 = system context, 2 = container, 3 = component."""
        if level == 1:
            self.collapse_by_type("system")
        elif level == 2:
            self.expand_by_type("system")
            self.collapse_by_type("container")
        elif level == 3:
            self.expand_by_type("system")
            self.expand_by_type("container")
        else:
            logger.warning("Unknown view level %s ignored", level)

    # ---------- focus ----------

    def set_focus(self, scope: Optional[Scope] = None):
        self.focus = scope
        focus_id = scope.focus_id if scope else None

        if not focus_id:
            for node in self.engine.nodes():
                node.opacity = 1.0
            for edge in self.engine.edges():
                edge.opacity = 1.0
            return

        in_focus: Set[str] = set()
        for node in self.engine.nodes():
            if node.id == focus_id or node.id.startswith(focus_id + "."):
                in_focus.add(node.id)
                node.opacity = 1.0
            else:
                node.opacity = self.dim_opacity

        # Edges crossing the focus boundary stay opaque
        for edge in self.engine.edges():
            if edge.source in in_focus or edge.target in in_focus:
                edge.opacity = 1.0
            else:
                edge.opacity = self.dim_opacity
