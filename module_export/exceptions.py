"""
Exception types raised while exporting modules.

Only SerializationError aborts an export. The other errors are caught by the
component that triggers them and turned into skipped modules, skipped links,
or omitted attributes.
"""

from typing import Any, Dict, Optional


class ModuleExportError(Exception):
    """Base exception for the module exporter."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ModuleOpenError(ModuleExportError):
    """
    Module could not be opened

    Raised by an accessor when the path is invalid, the module is missing, or
    another session holds it exclusively. The traverser skips the module.
    """

    pass


class LinkResolutionError(ModuleExportError):
    """
    Link endpoint could not be resolved

    Raised for a dangling relationship endpoint. The link extractor skips that
    one link.
    """

    pass


class UnsupportedAttributeTypeError(ModuleExportError):
    """Attribute kind or value has no scalar JSON representation."""

    pass


class SerializationError(ModuleExportError):
    """
    Export document could not be serialized

    The in-memory document broke an invariant the serializer relies on, so
    the whole export is abandoned.
    """

    pass
