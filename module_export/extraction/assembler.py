"""
Document assembler for module exports.

Wraps the exported modules into the export document and serializes it as
JSON. Key order is fixed so identical input always produces identical bytes:
within an object it is id, level, the attributes in extraction order, links,
then children.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import SerializationError
from .attribute_extractor import RESERVED_KEYS
from .data_models import ExportDocument, ExportedModule, ExportedObject, LinkDirection, ObjectLink

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Assembles and serializes the export document."""

    def __init__(self, indent: Optional[int] = 2):
        """
        Initialize the assembler.

        Args:
            indent: JSON indentation; None or 0 writes compact output
        """
        self.indent = indent or None

    def assemble(self,
                 modules: Sequence[ExportedModule],
                 root_module: str,
                 max_depth: int,
                 generated_at: Optional[datetime] = None) -> ExportDocument:
        """Wraps finished modules into an export document."""
        return ExportDocument(
            generated_at=generated_at or datetime.now(timezone.utc),
            root_module=root_module,
            max_depth=max_depth,
            modules=list(modules)
        )

    def finalize(self,
                 modules: Sequence[ExportedModule],
                 root_module: str,
                 max_depth: int,
                 generated_at: Optional[datetime] = None) -> bytes:
        """
        Assembles the export document and serializes it.

        Returns:
            UTF-8 encoded JSON

        Raises:
            SerializationError: the document cannot be represented as JSON
        """
        document = self.assemble(modules, root_module, max_depth, generated_at)
        return self.serialize(document)

    def serialize(self, document: ExportDocument) -> bytes:
        """
        Serializes an assembled document to UTF-8 JSON.

        The json encoder recurses once per nesting level, so an object tree
        nested deeper than the interpreter recursion limit allows raises
        SerializationError rather than producing partial output.
        """
        try:
            text = json.dumps(
                self.to_dict(document),
                indent=self.indent,
                ensure_ascii=False,
                allow_nan=False
            )
            data = text.encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(
                f"Export of {document.root_module} could not be serialized: {e}",
                {"root_module": document.root_module}
            ) from e

        logger.debug(f"Serialized export of {document.root_module}: {len(data)} bytes")
        return data

    def to_dict(self, document: ExportDocument) -> Dict[str, Any]:
        """Builds the output shape of the whole document."""
        return {
            "exportDate": document.generated_at.isoformat(),
            "rootModule": document.root_module,
            "maxDepth": document.max_depth,
            "modules": [
                {
                    "modulePath": module.path,
                    "moduleName": module.name,
                    "depth": module.depth,
                    "objects": self._object_dicts(module.objects)
                }
                for module in document.modules
            ]
        }

    def _object_dicts(self, objects: Sequence[ExportedObject]) -> List[Dict[str, Any]]:
        """Builds the output shape of object trees bottom-up without recursion."""
        order: List[ExportedObject] = []
        stack = list(objects)
        while stack:
            obj = stack.pop()
            order.append(obj)
            stack.extend(obj.children)

        built: Dict[int, Dict[str, Any]] = {}
        for obj in reversed(order):
            data: Dict[str, Any] = {
                "id": obj.identifier,
                "level": obj.level
            }
            for name, value in obj.attributes.items():
                if name in RESERVED_KEYS:
                    raise SerializationError(
                        f"Attribute '{name}' on object {obj.identifier} overwrites a reserved key",
                        {"object_id": obj.identifier, "attribute": name}
                    )
                data[name] = value
            data["links"] = [self._link_dict(link) for link in obj.links]
            data["children"] = [built[id(child)] for child in obj.children]
            built[id(obj)] = data
        return [built[id(obj)] for obj in objects]

    @staticmethod
    def _link_dict(link: ObjectLink) -> Dict[str, Any]:
        prefix = "target" if link.direction == LinkDirection.OUTGOING else "source"
        return {
            "type": link.link_type,
            "direction": link.direction.value,
            f"{prefix}Module": link.peer_module,
            f"{prefix}ObjectId": link.peer_object_id
        }
