import logging

from fastapi import APIRouter, HTTPException

from c4view.schemas import (
    GraphRequest,
    GraphResponse,
    ProjectionRequest,
    SerializeRequest,
)
from c4view.api.serializers import serialize_ir
from c4view.compiler.layout import plan_layout
from c4view.compiler.merge import build_graph
from c4view.compiler.projection import precompute_projections, project
from c4view.compiler.serialize import serialize_graph, to_document
from c4view.compiler.types import Edge, Graph, Node, Position, Scope
from c4view.ir.architecture import ArchitectureBody, DocumentMetadata, MetadataEntry
from c4view.ir.errors import UnknownScopeError
from c4view.ir.validation import BuildReport

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="",
    tags=["viewer"],
)


def _check_scope(body: ArchitectureBody, scope: Scope):
    if scope.container_id and not scope.system_id:
        raise UnknownScopeError("container_id requires system_id")

    if scope.system_id is None:
        return

    system = body.find_system(scope.system_id)
    if system is None:
        raise UnknownScopeError(f"Unknown system: {scope.system_id}")

    if scope.container_id:
        local_id = scope.container_id
        if local_id.startswith(system.id + "."):
            local_id = local_id[len(system.id) + 1:]
        if not any(c.id == local_id for c in system.containers):
            raise UnknownScopeError(f"Unknown container: {scope.container_id}")


def _graph_from_payload(request: SerializeRequest) -> Graph:
    nodes = []
    for payload in request.nodes:
        position = None
        if payload.position and "x" in payload.position and "y" in payload.position:
            position = Position(
                x=payload.position["x"],
                y=payload.position["y"],
                width=payload.position.get("width"),
                height=payload.position.get("height"),
            )
        nodes.append(Node(
            id=payload.id,
            label=payload.label or payload.id,
            type=payload.type,
            parent=payload.parent,
            metadata=[MetadataEntry.model_validate(m) for m in payload.metadata],
            description=payload.description,
            technology=payload.technology,
            position=position,
            external=payload.external,
        ))

    edges = [Edge(source=e.source, target=e.target, label=e.label, id=e.id) for e in request.edges]
    return Graph(nodes=nodes, edges=edges)


# -------------------------
# Graph building
# -------------------------

@router.post("/graph", response_model=GraphResponse)
def build_full_graph(request: GraphRequest):
    document = request.document
    report = BuildReport()
    graph = build_graph(document.architecture, document.metadata.layout, report)

    logger.info(
        "Built graph: %d nodes, %d edges, %d issues",
        len(graph.nodes), len(graph.edges), len(report.issues),
    )

    return {
        "status": "success" if report.is_clean else "warning",
        "graph": serialize_ir(graph),
        "issues": serialize_ir(report.issues),
    }


@router.post("/projection", response_model=GraphResponse)
def build_projection(request: ProjectionRequest):
    scope = Scope(system_id=request.system_id, container_id=request.container_id)
    body = request.document.architecture

    try:
        _check_scope(body, scope)
    except UnknownScopeError as e:
        raise HTTPException(status_code=404, detail=str(e))

    graph = project(body, scope)
    return {
        "status": "success",
        "graph": {"level": scope.level, **serialize_ir(graph)},
        "issues": [],
    }


@router.post("/projections")
def build_all_projections(request: GraphRequest):
    projections = precompute_projections(request.document.architecture)
    return {
        "status": "success",
        "system_context": serialize_ir(projections.system_context),
        "containers": serialize_ir(projections.containers),
        "components": serialize_ir(projections.components),
    }


# -------------------------
# Layout
# -------------------------

@router.post("/layout-plan")
def layout_plan(request: GraphRequest):
    document = request.document
    graph = build_graph(document.architecture, document.metadata.layout)
    plan = plan_layout(graph, document.metadata)
    return {"status": "success", "plan": serialize_ir(plan)}


# -------------------------
# Serialization
# -------------------------

@router.post("/serialize")
def serialize(request: SerializeRequest):
    graph = _graph_from_payload(request)

    if request.metadata is not None:
        document = to_document(graph, DocumentMetadata.model_validate(request.metadata))
        return {"status": "success", "document": document.to_json_dict()}

    result = serialize_graph(graph)
    return {
        "status": "success",
        "architecture": serialize_ir(result.architecture),
        "layout": serialize_ir(result.layout),
    }
