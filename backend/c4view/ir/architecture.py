from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional


class _DocumentModel(BaseModel):
    # Compiler output may carry sections this viewer does not interpret
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---- Metadata ----

class MetadataEntry(_DocumentModel):
    key: str
    value: Optional[str] = None
    array: List[str] = Field(default_factory=list)


def metadata_value(entries: List[MetadataEntry], key: str) -> Optional[str]:
    """
    Return the value of the first entry named `key`.
    Array entries are joined with ", ".
    """
    for entry in entries:
        if entry.key != key:
            continue
        if entry.value is not None:
            return entry.value
        if entry.array:
            return ", ".join(entry.array)
        return None
    return None


# ---- Relations ----

class Relation(_DocumentModel):
    from_: str = Field(alias="from")
    to: str
    verb: Optional[str] = None
    label: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @property
    def display_label(self) -> str:
        return self.label or self.verb or ""


# ---- Elements ----

class DataStore(_DocumentModel):
    id: str
    label: Optional[str] = None
    metadata: List[MetadataEntry] = Field(default_factory=list)


class Queue(_DocumentModel):
    id: str
    label: Optional[str] = None
    metadata: List[MetadataEntry] = Field(default_factory=list)


class Component(_DocumentModel):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None
    technology: Optional[str] = None
    relations: List[Relation] = Field(default_factory=list)
    metadata: List[MetadataEntry] = Field(default_factory=list)


class Container(_DocumentModel):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None
    technology: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    version: Optional[str] = None
    components: List[Component] = Field(default_factory=list)
    datastores: List[DataStore] = Field(default_factory=list)
    queues: List[Queue] = Field(default_factory=list)
    relations: List[Relation] = Field(default_factory=list)
    metadata: List[MetadataEntry] = Field(default_factory=list)


class System(_DocumentModel):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None
    containers: List[Container] = Field(default_factory=list)
    components: List[Component] = Field(default_factory=list)
    datastores: List[DataStore] = Field(default_factory=list)
    queues: List[Queue] = Field(default_factory=list)
    relations: List[Relation] = Field(default_factory=list)
    metadata: List[MetadataEntry] = Field(default_factory=list)


class Person(_DocumentModel):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None
    metadata: List[MetadataEntry] = Field(default_factory=list)


class Requirement(_DocumentModel):
    id: str
    type: Optional[str] = None  # functional | performance | security | constraint
    title: Optional[str] = None
    description: Optional[str] = None


class ADR(_DocumentModel):
    id: str
    title: Optional[str] = None
    status: Optional[str] = None
    context: Optional[str] = None
    decision: Optional[str] = None
    consequences: Optional[str] = None


class DeploymentNode(_DocumentModel):
    id: str
    label: Optional[str] = None


# ---- Root ----

class ArchitectureBody(_DocumentModel):
    persons: List[Person] = Field(default_factory=list)
    systems: List[System] = Field(default_factory=list)
    relations: List[Relation] = Field(default_factory=list)

    # Parentless elements declared outside any system
    containers: List[Container] = Field(default_factory=list)
    datastores: List[DataStore] = Field(default_factory=list)
    queues: List[Queue] = Field(default_factory=list)

    requirements: List[Requirement] = Field(default_factory=list)
    adrs: List[ADR] = Field(default_factory=list)
    deployment: List[DeploymentNode] = Field(default_factory=list)

    def find_system(self, system_id: str) -> Optional[System]:
        return next((s for s in self.systems if s.id == system_id), None)


class LayoutData(_DocumentModel):
    x: int
    y: int
    width: Optional[int] = None
    height: Optional[int] = None


class DocumentMetadata(_DocumentModel):
    name: str = ""
    version: str = ""
    generated: str = ""
    layout: Dict[str, LayoutData] = Field(default_factory=dict)
    layoutEngine: Optional[str] = None
    brandLogo: Optional[str] = None


class Navigation(_DocumentModel):
    levels: List[str] = Field(default_factory=list)


class ArchitectureDocument(_DocumentModel):
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    architecture: ArchitectureBody = Field(default_factory=ArchitectureBody)
    navigation: Navigation = Field(default_factory=Navigation)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
