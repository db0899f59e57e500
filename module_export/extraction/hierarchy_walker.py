"""
Hierarchy walker for module contents.

Rebuilds the nested object tree of a module from its flat, level-annotated
object sequence. No parent pointers are needed from the host: an object
becomes the last child of the nearest open object with a lower level.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .attribute_extractor import AttributeExtractor
from .data_models import ExportedObject, FlatObject, LinkWarning, ObjectLink, WalkResult
from .link_extractor import LinkExtractor, Resolver

logger = logging.getLogger(__name__)


class _DraftObject:
    """Mutable node used while the tree is still being assembled."""

    def __init__(self, identifier: str, level: int, attributes: Dict[str, Any], links: List[ObjectLink]):
        self.identifier = identifier
        self.level = level
        self.attributes = attributes
        self.links = links
        self.children: List["_DraftObject"] = []


def _freeze(roots: List[_DraftObject]) -> List[ExportedObject]:
    """Freezes draft trees bottom-up without recursion."""
    order: List[_DraftObject] = []
    stack = list(roots)
    while stack:
        draft = stack.pop()
        order.append(draft)
        stack.extend(draft.children)

    # every child is visited after its parent, so the reversed order freezes children first
    frozen: Dict[int, ExportedObject] = {}
    for draft in reversed(order):
        frozen[id(draft)] = ExportedObject(
            identifier=draft.identifier,
            level=draft.level,
            attributes=draft.attributes,
            links=draft.links,
            children=[frozen[id(child)] for child in draft.children]
        )
    return [frozen[id(root)] for root in roots]


def iter_preorder(objects: Iterable[ExportedObject]) -> Iterator[ExportedObject]:
    """Yield objects depth-first, parents before their children."""
    stack = list(reversed(list(objects)))
    while stack:
        obj = stack.pop()
        yield obj
        stack.extend(reversed(obj.children))


class HierarchyWalker:
    """Builds nested export objects from a module's flat object sequence."""

    def __init__(self,
                 attribute_extractor: Optional[AttributeExtractor] = None,
                 link_extractor: Optional[LinkExtractor] = None):
        self.attribute_extractor = attribute_extractor or AttributeExtractor()
        self.link_extractor = link_extractor or LinkExtractor()

    def build(self,
              flat_objects: Iterable[FlatObject],
              module_path: str = "",
              resolve: Optional[Resolver] = None) -> WalkResult:
        """
        Reconstructs the object tree of one module.

        A level jump of more than one (1 followed by 3) attaches the object to
        the nearest open ancestor; no intermediate object is invented.

        Args:
            flat_objects: Objects in the module's native order
            module_path: Path of the module being walked
            resolve: Resolves raw link endpoints against the open module

        Returns:
            WalkResult with the top-level objects and any link warnings
        """
        roots: List[_DraftObject] = []
        # open ancestors, strictly increasing in level from bottom to top
        stack: List[_DraftObject] = []
        warnings: List[LinkWarning] = []
        count = 0

        for flat in flat_objects:
            extraction = self.link_extractor.extract(flat, module_path, resolve)
            warnings.extend(extraction.warnings)
            node = _DraftObject(
                identifier=flat.identifier,
                level=flat.level,
                attributes=self.attribute_extractor.extract(flat),
                links=extraction.links
            )

            while stack and stack[-1].level >= node.level:
                stack.pop()

            if stack:
                stack[-1].children.append(node)
            else:
                roots.append(node)
            stack.append(node)
            count += 1

        logger.debug(f"Walked {count} objects ({len(roots)} top-level) in {module_path or 'module'}")
        return WalkResult(objects=_freeze(roots), warnings=warnings)
