"""
Extraction module for turning module contents into export records.

Per object, attributes and links are extracted independently; per module,
the hierarchy walker nests objects by level; the assembler wraps finished
modules into the serialized export document.
"""

from .attribute_extractor import AttributeExtractor
from .link_extractor import LinkExtractor, direct_resolve
from .hierarchy_walker import HierarchyWalker, iter_preorder
from .assembler import DocumentAssembler
from .data_models import (
    NO_VALUE,
    AttributeKind,
    AttributeValue,
    ExportDocument,
    ExportedModule,
    ExportedObject,
    FlatObject,
    LinkDirection,
    LinkEndpoint,
    ModuleHandle,
    ObjectLink,
    RawRelationship,
    ResolvedEndpoint,
    TraversalReport,
    TraversalResult,
)

__all__ = [
    "AttributeExtractor",
    "LinkExtractor",
    "direct_resolve",
    "HierarchyWalker",
    "iter_preorder",
    "DocumentAssembler",
    "NO_VALUE",
    "AttributeKind",
    "AttributeValue",
    "ExportDocument",
    "ExportedModule",
    "ExportedObject",
    "FlatObject",
    "LinkDirection",
    "LinkEndpoint",
    "ModuleHandle",
    "ObjectLink",
    "RawRelationship",
    "ResolvedEndpoint",
    "TraversalReport",
    "TraversalResult"
]
