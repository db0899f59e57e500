"""
Link extractor for module objects.

Turns the raw relationships of one object into link records that name the
module and object at the other end. Outgoing relationships come first, then
incoming ones, each in the host's order.
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..exceptions import LinkResolutionError
from .data_models import (
    FlatObject,
    LinkDirection,
    LinkEndpoint,
    LinkExtraction,
    LinkWarning,
    ObjectLink,
    ResolvedEndpoint,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[LinkEndpoint], ResolvedEndpoint]


def direct_resolve(endpoint: LinkEndpoint) -> ResolvedEndpoint:
    """Resolve an endpoint that already carries its module path and object id."""
    if not endpoint.module or not endpoint.object_id:
        raise LinkResolutionError(
            "dangling link endpoint",
            {"module": endpoint.module, "object_id": endpoint.object_id}
        )
    return ResolvedEndpoint(module=endpoint.module, object_id=endpoint.object_id)


class LinkExtractor:
    """Extracts outgoing and incoming links from a flat object."""

    def __init__(self, include_link_types: Optional[Iterable[str]] = None):
        """
        Initialize the link extractor.

        Args:
            include_link_types: Only emit relationships of these types. All
                types are emitted when empty or None.
        """
        self.include_link_types = frozenset(include_link_types) if include_link_types else None

    def extract(self,
                obj: FlatObject,
                module_path: str = "",
                resolve: Optional[Resolver] = None) -> LinkExtraction:
        """
        Extracts every link of one object.

        Args:
            obj: Flat object as read from the module accessor
            module_path: Path of the module that owns the object, for warnings
            resolve: Resolves a raw endpoint against the open module

        Returns:
            LinkExtraction with the links in order and a warning per skipped endpoint
        """
        resolve = resolve or direct_resolve
        links: List[ObjectLink] = []
        warnings: List[LinkWarning] = []

        for direction, relationships in ((LinkDirection.OUTGOING, obj.out_links),
                                         (LinkDirection.INCOMING, obj.in_links)):
            for relationship in relationships:
                if self.include_link_types is not None and relationship.link_type not in self.include_link_types:
                    continue

                for endpoint in relationship.targets:
                    try:
                        resolved = resolve(endpoint)
                    except LinkResolutionError as e:
                        logger.warning(
                            f"Skipping {direction.value} '{relationship.link_type}' link on "
                            f"{module_path}#{obj.identifier}: {e}"
                        )
                        warnings.append(LinkWarning(
                            module=module_path,
                            object_id=obj.identifier,
                            link_type=relationship.link_type,
                            direction=direction,
                            reason=str(e)
                        ))
                        continue

                    links.append(ObjectLink(
                        link_type=relationship.link_type,
                        direction=direction,
                        peer_module=resolved.module,
                        peer_object_id=resolved.object_id
                    ))

        return LinkExtraction(links=links, warnings=warnings)
