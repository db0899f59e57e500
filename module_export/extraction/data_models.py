"""
Data models for the extraction module.

Defines the flat records a module accessor hands out, the structure of the
exported document, and the report gathered alongside a traversal.
"""

from enum import Enum
from typing import List, Dict, Any, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class _NoValue:
    """Marker for an attribute the host reports as having no value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


class AttributeKind(str, Enum):
    """Attribute kinds that have a scalar JSON representation."""
    TEXT = "text"
    STRING = "string"
    INTEGER = "integer"
    REAL = "real"
    DATE = "date"
    BOOLEAN = "boolean"


class LinkDirection(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


# Host-side records

class ModuleHandle(BaseModel):
    """An open, read-only module session."""
    path: str
    name: str


class AttributeValue(BaseModel):
    """One named attribute as the host enumerates it."""
    name: str
    kind: str  # text, string, integer, real, date, boolean, or a host-specific kind
    raw_value: Any = None


class LinkEndpoint(BaseModel):
    """Unresolved far end of a relationship; either part may be missing."""
    module: Optional[str] = None
    object_id: Optional[str] = None


class RawRelationship(BaseModel):
    """A relationship instance, possibly with several simultaneous targets."""
    link_type: str
    targets: List[LinkEndpoint] = Field(default_factory=list)


class ResolvedEndpoint(BaseModel):
    module: str
    object_id: str


class FlatObject(BaseModel):
    """One object in a module's native order, before hierarchy reconstruction."""
    identifier: str
    level: int = Field(ge=1)
    attributes: List[AttributeValue] = Field(default_factory=list)
    out_links: List[RawRelationship] = Field(default_factory=list)
    in_links: List[RawRelationship] = Field(default_factory=list)


# Export document

class ObjectLink(BaseModel):
    """One relationship instance seen from the exported object."""
    model_config = ConfigDict(frozen=True)

    link_type: str
    direction: LinkDirection
    peer_module: str
    peer_object_id: str


class ExportedObject(BaseModel):
    """An object with its attributes, links and nested children."""
    model_config = ConfigDict(frozen=True)

    identifier: str
    level: int
    attributes: Dict[str, Any] = Field(default_factory=dict)
    links: List[ObjectLink] = Field(default_factory=list)
    children: List["ExportedObject"] = Field(default_factory=list)


class ExportedModule(BaseModel):
    """One exported module at the traversal depth it was first reached."""
    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    depth: int = Field(ge=0)
    objects: List[ExportedObject] = Field(default_factory=list)


class ExportDocument(BaseModel):
    """Root of the export: the root module first, then modules in discovery order."""
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    root_module: str
    max_depth: int
    modules: List[ExportedModule] = Field(default_factory=list)


ExportedObject.model_rebuild()


# Traversal report

class LinkWarning(BaseModel):
    """A link that was skipped because its endpoint could not be resolved."""
    module: str
    object_id: str
    link_type: str
    direction: LinkDirection
    reason: str


class LinkExtraction(BaseModel):
    links: List[ObjectLink] = Field(default_factory=list)
    warnings: List[LinkWarning] = Field(default_factory=list)


class WalkResult(BaseModel):
    """Top-level objects of one module plus the link warnings raised while walking it."""
    objects: List[ExportedObject] = Field(default_factory=list)
    warnings: List[LinkWarning] = Field(default_factory=list)


class SkippedModule(BaseModel):
    path: str
    depth: int
    reason: str


class TraversalReport(BaseModel):
    """What happened during a traversal; logged, never exported."""
    skipped_modules: List[SkippedModule] = Field(default_factory=list)
    link_warnings: List[LinkWarning] = Field(default_factory=list)
    cancelled: bool = False
    module_count: int = 0
    object_count: int = 0
    link_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Return a summary for logging."""
        return {
            "modules": self.module_count,
            "objects": self.object_count,
            "links": self.link_count,
            "skipped_modules": [m.path for m in self.skipped_modules],
            "link_warnings": len(self.link_warnings),
            "cancelled": self.cancelled
        }


class TraversalResult(BaseModel):
    document: ExportDocument
    report: TraversalReport = Field(default_factory=TraversalReport)
