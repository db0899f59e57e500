"""
Attribute extractor for module objects.

Keeps the non-empty scalar attributes of one object, converted to JSON-ready
values, in the order the host enumerates them. Opaque kinds (binary, OLE and
anything else without a scalar form) are left out entirely.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from ..exceptions import UnsupportedAttributeTypeError
from .data_models import AttributeKind, AttributeValue, FlatObject, _NoValue

logger = logging.getLogger(__name__)

# Keys the exported object shape uses for its own fields
RESERVED_KEYS = frozenset({"id", "level", "links", "children"})

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}

# Raw value types with a scalar reading; datetime is a subclass of date
_SCALAR_TYPES = (str, int, float, bool, date)


class AttributeExtractor:
    """Extracts typed scalar attributes from a flat object."""

    def __init__(self, exclude_attributes: Optional[Iterable[str]] = None):
        """
        Initialize the attribute extractor.

        Args:
            exclude_attributes: Attribute names that are never exported
        """
        self.exclude_attributes = frozenset(exclude_attributes or ())

    def extract(self, obj: FlatObject) -> Dict[str, Any]:
        """
        Extracts the exportable attributes of one object.

        Args:
            obj: Flat object as read from the module accessor

        Returns:
            Mapping of attribute name to scalar value, in enumeration order
        """
        result: Dict[str, Any] = {}

        for attribute in obj.attributes:
            if attribute.name in self.exclude_attributes:
                continue
            if attribute.name in RESERVED_KEYS:
                logger.warning(
                    f"Attribute '{attribute.name}' on object {obj.identifier} "
                    f"clashes with a reserved key and is not exported"
                )
                continue
            if AttributeExtractor.is_empty(attribute.raw_value):
                continue

            try:
                result[attribute.name] = AttributeExtractor.convert(attribute)
            except UnsupportedAttributeTypeError as e:
                logger.debug(f"Omitting attribute '{attribute.name}' on object {obj.identifier}: {e}")

        return result

    @staticmethod
    def is_empty(value: Any) -> bool:
        """True for values the export treats as absent. Zero and False are not empty."""
        if value is None or isinstance(value, _NoValue):
            return True
        if isinstance(value, str):
            return value == ""
        if isinstance(value, float):
            return not math.isfinite(value)
        return False

    @staticmethod
    def convert(attribute: AttributeValue) -> Any:
        """
        Converts a raw host value to the JSON scalar for its declared kind.

        Raises:
            UnsupportedAttributeTypeError: kind is not a scalar kind, or the
                value cannot be read as that kind
        """
        try:
            kind = AttributeKind(str(attribute.kind).strip().lower())
        except ValueError:
            raise UnsupportedAttributeTypeError(
                f"unsupported attribute type '{attribute.kind}'",
                {"attribute": attribute.name, "kind": attribute.kind}
            )

        value = attribute.raw_value
        if isinstance(value, (bytes, bytearray, memoryview)):
            raise UnsupportedAttributeTypeError(
                "binary payload", {"attribute": attribute.name, "kind": kind.value}
            )
        if not isinstance(value, _SCALAR_TYPES):
            raise UnsupportedAttributeTypeError(
                f"non-scalar {type(value).__name__} value", {"attribute": attribute.name, "kind": kind.value}
            )

        try:
            if kind in (AttributeKind.TEXT, AttributeKind.STRING):
                return value if isinstance(value, str) else str(value)
            if kind == AttributeKind.INTEGER:
                return AttributeExtractor._to_int(value)
            if kind == AttributeKind.REAL:
                return AttributeExtractor._to_float(value)
            if kind == AttributeKind.BOOLEAN:
                return AttributeExtractor._to_bool(value)
            return AttributeExtractor._to_date(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise UnsupportedAttributeTypeError(
                f"{type(value).__name__} value is not a valid {kind.value}: {e}",
                {"attribute": attribute.name, "kind": kind.value}
            ) from e

    @staticmethod
    def _to_int(value: Any) -> int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("fractional value")
            return int(value)
        if isinstance(value, str):
            return int(value.strip())
        return int(value)

    @staticmethod
    def _to_float(value: Any) -> float:
        result = float(value.strip() if isinstance(value, str) else value)
        if not math.isfinite(result):
            raise ValueError("non-finite value")
        return result

    @staticmethod
    def _to_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValueError("not a boolean")

    @staticmethod
    def _to_date(value: Any) -> str:
        # datetime is a subclass of date
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, str):
            return value
        raise TypeError(f"unexpected {type(value).__name__}")
