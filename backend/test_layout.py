"""Tests for choosing between stored positions and an algorithmic layout."""

from c4view.compiler.layout import KNOWN_LAYOUT_ENGINES, plan_layout, select_engine
from c4view.compiler.merge import build_graph
from c4view.config import DEFAULT_LAYOUT_ENGINE
from c4view.ir.architecture import DocumentMetadata, LayoutData


def test_no_layout_map_means_algorithmic(sample_document):
    graph = build_graph(sample_document.architecture)
    plan = plan_layout(graph, sample_document.metadata)

    assert not plan.is_preset
    assert plan.engine in KNOWN_LAYOUT_ENGINES
    assert plan.options["rankDir"] == "TB"
    assert plan.options["name"] == plan.engine


def test_requested_engine_is_honoured(sample_document):
    graph = build_graph(sample_document.architecture)
    metadata = DocumentMetadata(layoutEngine="elk")
    assert plan_layout(graph, metadata).engine == "elk"


def test_unknown_engine_falls_back():
    assert select_engine("spring") == select_engine(None)
    assert select_engine(None) in KNOWN_LAYOUT_ENGINES
    if DEFAULT_LAYOUT_ENGINE in KNOWN_LAYOUT_ENGINES:
        assert select_engine(None) == DEFAULT_LAYOUT_ENGINE


def test_stored_positions_mean_preset(sample_document):
    layout = {"User": LayoutData(x=0, y=0), "Sys1": LayoutData(x=300, y=0)}
    metadata = DocumentMetadata(layout=layout)
    graph = build_graph(sample_document.architecture, layout)
    plan = plan_layout(graph, metadata)

    assert plan.is_preset
    assert plan.options["name"] == "preset"


def test_layout_map_without_matching_nodes_is_algorithmic(sample_document):
    layout = {"Removed": LayoutData(x=0, y=0)}
    metadata = DocumentMetadata(layout=layout)
    graph = build_graph(sample_document.architecture, layout)

    assert not plan_layout(graph, metadata).is_preset


def test_no_metadata():
    from c4view.compiler.types import Graph

    plan = plan_layout(Graph(), None)
    assert not plan.is_preset
