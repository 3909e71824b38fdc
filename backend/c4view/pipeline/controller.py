import asyncio
import logging
from typing import Callable, Dict, Optional

from c4view.compiler.layout import LayoutPlan
from c4view.compiler.types import Graph
from c4view.config import (
    FIT_PADDING,
    FIT_RETRY_ATTEMPTS,
    FIT_RETRY_DELAY,
    SURFACE_POLL_INTERVAL,
    SURFACE_WAIT_TIMEOUT,
)
from c4view.renderer.engine import LAYOUT_STOP, RenderEngine
from c4view.renderer.surface import DrawingSurface, ResizeObservable, has_area
from c4view.visual.visual_mapper import to_elements
from c4view.visual.visual_style import VISUAL_STYLE

logger = logging.getLogger(__name__)

EngineFactory = Callable[[DrawingSurface], RenderEngine]


class LayoutOrchestrator:
    """
    Hands a built graph to the render engine and fits the view once the
    layout is known to be complete.

    Every render gets a generation number. Callbacks from an older
    generation (a layout finishing after its graph was replaced) do nothing.
    """

    def __init__(
        self,
        engine_factory: EngineFactory,
        style: Optional[Dict[str, dict]] = None,
        fit_padding: float = FIT_PADDING,
        surface_timeout: float = SURFACE_WAIT_TIMEOUT,
        poll_interval: float = SURFACE_POLL_INTERVAL,
        fit_attempts: int = FIT_RETRY_ATTEMPTS,
        fit_delay: float = FIT_RETRY_DELAY,
    ):
        self.engine_factory = engine_factory
        self.style = style if style is not None else VISUAL_STYLE
        self.fit_padding = fit_padding
        self.surface_timeout = surface_timeout
        self.poll_interval = poll_interval
        self.fit_attempts = fit_attempts
        self.fit_delay = fit_delay

        self.generation = 0
        self._engine: Optional[RenderEngine] = None
        self._layout_stop_handler: Optional[Callable[[], None]] = None
        self._fit_task: Optional[asyncio.Task] = None

    # ---------- surface handshake ----------

    async def wait_for_surface_size(self, surface: DrawingSurface) -> bool:
        """
        Wait until the surface has a non-zero size, at most `surface_timeout`
        seconds. Returns whether it did; never raises.
        """
        if has_area(surface):
            return True

        logger.debug("Surface has zero size %s, waiting for resize", surface.size())

        if isinstance(surface, ResizeObservable):
            sized = asyncio.Event()

            def on_resize(width: float, height: float):
                if width > 0 and height > 0:
                    sized.set()

            unsubscribe = surface.on_resize(on_resize)
            try:
                await asyncio.wait_for(sized.wait(), timeout=self.surface_timeout)
                return True
            except asyncio.TimeoutError:
                logger.warning("Surface still zero-sized after %.2fs; continuing", self.surface_timeout)
                return False
            finally:
                unsubscribe()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.surface_timeout
        while loop.time() < deadline:
            await asyncio.sleep(self.poll_interval)
            if has_area(surface):
                return True

        logger.warning("Surface still zero-sized after %.2fs; continuing", self.surface_timeout)
        return False

    # ---------- fit ----------

    async def fit_with_retry(self, engine: RenderEngine, surface: DrawingSurface, generation: int) -> bool:
        for attempt in range(self.fit_attempts):
            if generation != self.generation:
                return False
            if has_area(surface):
                engine.fit(self.fit_padding)
                return True
            logger.debug("Fit attempt %d: surface not sized yet", attempt + 1)
            await asyncio.sleep(self.fit_delay)

        logger.warning("Gave up fitting view after %d attempts", self.fit_attempts)
        return False

    def _schedule_fit(self, engine: RenderEngine, surface: DrawingSurface, generation: int):
        self._fit_task = asyncio.ensure_future(self.fit_with_retry(engine, surface, generation))

    # ---------- run ----------

    async def run(self, graph: Graph, plan: LayoutPlan, surface: DrawingSurface) -> Optional[RenderEngine]:
        """
        Mount `graph` on a fresh engine. In preset mode the stored positions
        are used as-is and the view is fitted right away; otherwise the fit
        waits for the engine's layout-complete event.

        Returns None, without building an engine, when another run or a
        cancel() superseded this one while it waited for the surface.
        """
        self.cancel()
        self.generation += 1
        generation = self.generation

        await self.wait_for_surface_size(surface)
        if generation != self.generation:
            logger.debug("Render %d superseded while waiting for the surface", generation)
            return None

        engine = self.engine_factory(surface)
        self._engine = engine
        engine.mount(to_elements(graph), self.style, plan.options)

        if plan.is_preset:
            engine.run_layout()
            await self.fit_with_retry(engine, surface, generation)
            return engine

        def on_layout_stop(*_args):
            engine.off(LAYOUT_STOP, on_layout_stop)
            if self._layout_stop_handler is on_layout_stop:
                self._layout_stop_handler = None
            if generation != self.generation:
                logger.debug("Ignoring layoutstop from superseded render %d", generation)
                return
            self._schedule_fit(engine, surface, generation)

        self._layout_stop_handler = on_layout_stop
        engine.on(LAYOUT_STOP, on_layout_stop)
        engine.run_layout()
        return engine

    async def wait_idle(self):
        """Wait for a scheduled fit, if any."""
        if self._fit_task is not None:
            await asyncio.gather(self._fit_task, return_exceptions=True)

    def cancel(self):
        """Detach from the current render so its late callbacks are no-ops."""
        self.generation += 1
        if self._engine is not None and self._layout_stop_handler is not None:
            self._engine.off(LAYOUT_STOP, self._layout_stop_handler)
        self._layout_stop_handler = None
        self._engine = None
        if self._fit_task is not None and not self._fit_task.done():
            self._fit_task.cancel()
        self._fit_task = None
