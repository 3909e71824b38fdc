from c4view.compiler.merge import build_graph
from c4view.compiler.layout import plan_layout
from c4view.compiler.projection import precompute_projections, project
from c4view.compiler.serialize import serialize_graph, to_document

__all__ = [
    "build_graph",
    "plan_layout",
    "precompute_projections",
    "project",
    "serialize_graph",
    "to_document",
]
