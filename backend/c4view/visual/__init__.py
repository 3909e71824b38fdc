# Visual module
# Element definitions handed to the render engine, and the style table they use

from c4view.visual.visual_schema import ElementDefinition, RenderedNode, RenderedEdge
from c4view.visual.visual_style import VISUAL_STYLE
from c4view.visual.visual_mapper import to_elements, from_rendered

__all__ = [
    "ElementDefinition",
    "RenderedNode",
    "RenderedEdge",
    "VISUAL_STYLE",
    "to_elements",
    "from_rendered",
]
