import logging
import re
from typing import Callable, Dict, Optional, Union

from c4view.compiler.layout import LayoutPlan, plan_layout
from c4view.compiler.merge import build_graph
from c4view.compiler.projection import project
from c4view.compiler.serialize import extract_layout, to_document
from c4view.compiler.types import Graph, Scope
from c4view.config import FIT_PADDING
from c4view.ir.architecture import ArchitectureDocument, DocumentMetadata, LayoutData
from c4view.ir.errors import ContainerNotFoundError
from c4view.ir.validation import BuildReport
from c4view.pipeline.controller import EngineFactory, LayoutOrchestrator
from c4view.renderer.engine import DRAG_END, SELECT, UNSELECT, HeadlessRenderEngine, RenderEngine
from c4view.renderer.surface import DrawingSurface, SurfaceRegistry
from c4view.visual.controller import ViewController
from c4view.visual.visual_mapper import from_rendered
from c4view.visual.visual_schema import ElementDefinition

logger = logging.getLogger(__name__)

DocumentInput = Union[ArchitectureDocument, dict]
SelectCallback = Callable[[Optional[str]], None]
LayoutChangeCallback = Callable[[Dict[str, LayoutData]], None]

# Offset of a newly added child from its parent's centre
NEW_NODE_OFFSET = 40.0


def _as_document(document: Optional[DocumentInput]) -> Optional[ArchitectureDocument]:
    if document is None or isinstance(document, ArchitectureDocument):
        return document
    return ArchitectureDocument.model_validate(document)


class ArchitectureViewer:
    """
    Interactive view over one architecture document.

    The viewer owns a single render at a time. Loading a document or changing
    the scope tears the previous render down (engine, listeners, pending fit)
    before the next graph is built and mounted.
    """

    def __init__(
        self,
        container: Union[str, DrawingSurface],
        document: Optional[DocumentInput] = None,
        on_select: Optional[SelectCallback] = None,
        on_layout_change: Optional[LayoutChangeCallback] = None,
        registry: Optional[SurfaceRegistry] = None,
        engine_factory: EngineFactory = HeadlessRenderEngine,
        orchestrator: Optional[LayoutOrchestrator] = None,
    ):
        self.container = container
        self.document = _as_document(document)
        self.on_select = on_select
        self.on_layout_change = on_layout_change
        self.registry = registry
        self.orchestrator = orchestrator or LayoutOrchestrator(engine_factory)

        self.scope: Optional[Scope] = None
        self.engine: Optional[RenderEngine] = None
        self.controller: Optional[ViewController] = None
        self.surface: Optional[DrawingSurface] = None
        self.report = BuildReport()
        self.plan: Optional[LayoutPlan] = None
        self._render_token = 0

    # ---------- lifecycle ----------

    def _resolve_container(self) -> DrawingSurface:
        if not isinstance(self.container, str):
            return self.container
        surface = self.registry.get(self.container) if self.registry else None
        if surface is None:
            raise ContainerNotFoundError(self.container)
        return surface

    def _build(self) -> Graph:
        self.report = BuildReport()
        if self.document is None:
            return Graph()

        body = self.document.architecture
        if self.scope is not None:
            return project(body, self.scope)
        return build_graph(body, self.document.metadata.layout, self.report)

    async def init(self):
        """Build and render the current document (an empty graph when none)."""
        surface = self._resolve_container()
        self.destroy()
        self._render_token += 1
        token = self._render_token
        self.surface = surface

        graph = self._build()
        metadata = self.document.metadata if self.document else None
        self.plan = plan_layout(graph, metadata)
        logger.info(
            "Rendering %d nodes, %d edges (%s layout)",
            len(graph.nodes), len(graph.edges), self.plan.engine,
        )

        engine = await self.orchestrator.run(graph, self.plan, surface)
        if engine is None or token != self._render_token:
            # A newer init/load owns the view now
            logger.debug("Discarding superseded render %d", token)
            if engine is not None:
                engine.destroy()
            return

        self.engine = engine
        self.controller = ViewController(engine)
        engine.on(SELECT, self._handle_select)
        engine.on(UNSELECT, self._handle_unselect)
        engine.on(DRAG_END, self._handle_drag)

        if self.report.issues:
            logger.info("Build recovered from %d issue(s)", len(self.report.issues))

    async def load(self, document: DocumentInput):
        self.document = _as_document(document)
        await self.init()

    async def show(self, scope: Optional[Scope] = None):
        """Re-render as a C4 projection; `None` goes back to the full hierarchy."""
        self.scope = scope
        await self.init()

    def destroy(self):
        self.orchestrator.cancel()
        if self.engine is not None:
            self.engine.destroy()
        self.engine = None
        self.controller = None

    def reset(self):
        if self.engine is None:
            return
        self.engine.unselect_all()
        self.controller.set_focus(None)
        self.engine.fit(FIT_PADDING)

    # ---------- events ----------

    def _handle_select(self, node_id: Optional[str] = None):
        if self.on_select:
            self.on_select(node_id)

    def _handle_unselect(self, *_args):
        if self.on_select:
            self.on_select(None)

    def _handle_drag(self, *_args):
        if self.on_layout_change:
            self.on_layout_change(self.get_layout())

    # ---------- view state ----------

    def set_level(self, level: int):
        if self.controller:
            self.controller.set_level(level)

    def set_focus(self, scope: Optional[Scope] = None):
        if self.controller:
            self.controller.set_focus(scope)

    def toggle_collapse(self, node_id: str) -> bool:
        if not self.controller:
            return False
        return self.controller.toggle(node_id)

    def select_node(self, node_id: str) -> bool:
        if self.engine is None or self.engine.node(node_id) is None:
            return False
        self.controller.expand_ancestors(node_id)
        self.engine.unselect_all()
        self.engine.select(node_id)
        return True

    # ---------- editing ----------

    def add_node(self, node_type: str, label: str, parent: Optional[str] = None) -> Optional[str]:
        if self.engine is None:
            return None

        base = re.sub(r"\s+", "", label)
        if parent:
            base = f"{parent}.{base}"
        node_id = base
        counter = 1
        while self.engine.node(node_id) is not None:
            node_id = f"{base}{counter}"
            counter += 1

        data: Dict[str, object] = {"id": node_id, "label": label, "type": node_type}
        position = None
        parent_node = self.engine.node(parent) if parent else None
        if parent_node is not None:
            data["parent"] = parent
            position = {"x": parent_node.x + NEW_NODE_OFFSET, "y": parent_node.y + NEW_NODE_OFFSET}

        self.engine.add(ElementDefinition(group="nodes", data=data, position=position))
        return node_id

    def add_edge(self, source: str, target: str, label: str = "") -> Optional[str]:
        if self.engine is None:
            return None
        if self.engine.node(source) is None or self.engine.node(target) is None:
            logger.debug("add_edge: unknown endpoint %s -> %s", source, target)
            return None

        existing = {e.id for e in self.engine.edges()}
        base = f"{source}->{target}"
        edge_id = base
        counter = 2
        while edge_id in existing:
            edge_id = f"{base}-{counter}"
            counter += 1

        self.engine.add(ElementDefinition(
            group="edges",
            data={"id": edge_id, "source": source, "target": target, "label": label},
        ))
        return edge_id

    def remove_selected(self) -> int:
        if self.engine is None:
            return 0
        selected = [n.id for n in self.engine.nodes() if n.selected]
        selected += [e.id for e in self.engine.edges() if e.selected]
        for element_id in selected:
            self.engine.remove(element_id)
        if selected:
            self._handle_unselect()
        return len(selected)

    # ---------- read back ----------

    def snapshot(self) -> Graph:
        if self.engine is None:
            return Graph()
        return from_rendered(self.engine.nodes(), self.engine.edges())

    def get_layout(self) -> Dict[str, LayoutData]:
        return extract_layout(self.snapshot())

    def to_json(self) -> dict:
        if self.engine is None:
            return (self.document or ArchitectureDocument()).to_json_dict()

        base = self.document.metadata if self.document else DocumentMetadata()
        document = to_document(self.snapshot(), base)
        if self.document is not None:
            document.navigation = self.document.navigation
        return document.to_json_dict()
