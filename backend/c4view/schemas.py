from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from c4view.ir.architecture import ArchitectureDocument


class GraphRequest(BaseModel):
    """A full architecture document, as stored by the persistence layer"""
    document: ArchitectureDocument


class ProjectionRequest(BaseModel):
    document: ArchitectureDocument
    system_id: Optional[str] = None  # None = system context view
    container_id: Optional[str] = None  # requires system_id


class NodePayload(BaseModel):
    id: str
    label: str = ""
    type: str = "container"
    parent: Optional[str] = None
    description: Optional[str] = None
    technology: Optional[str] = None
    external: bool = False
    metadata: List[Dict[str, Any]] = []
    position: Optional[Dict[str, float]] = None  # x, y, width?, height?


class EdgePayload(BaseModel):
    source: str
    target: str
    label: str = ""
    id: str = ""


class SerializeRequest(BaseModel):
    """Edited graph read back from the render engine"""
    nodes: List[NodePayload] = []
    edges: List[EdgePayload] = []
    metadata: Optional[Dict[str, Any]] = None  # base document metadata


class GraphResponse(BaseModel):
    status: str
    graph: Dict[str, Any]
    issues: List[Dict[str, Any]] = Field(default_factory=list)
