import logging
from collections import deque
from datetime import datetime
from functools import partial
from typing import Callable, Deque, List, Optional, Set, Tuple

from module_export.exceptions import ModuleOpenError
from module_export.extraction.assembler import DocumentAssembler
from module_export.extraction.attribute_extractor import AttributeExtractor
from module_export.extraction.data_models import (
    ExportedModule,
    LinkWarning,
    SkippedModule,
    TraversalReport,
    TraversalResult,
)
from module_export.extraction.hierarchy_walker import HierarchyWalker, iter_preorder
from module_export.extraction.link_extractor import LinkExtractor
from module_export.traversal.accessor import ModuleAccessor
from module_export.traversal.export_options import ExportOptions

logger = logging.getLogger(__name__)


class ModuleTraverser:
    """Exports a root module and the modules its links reach, breadth-first."""

    def __init__(self,
                 accessor: ModuleAccessor,
                 options: Optional[ExportOptions] = None,
                 walker: Optional[HierarchyWalker] = None,
                 assembler: Optional[DocumentAssembler] = None):
        self.accessor = accessor
        self.options = options or ExportOptions()
        self.walker = walker or HierarchyWalker(
            AttributeExtractor(self.options.exclude_attributes),
            LinkExtractor(self.options.include_link_types)
        )
        self.assembler = assembler or DocumentAssembler(self.options.indent)

    def run(self,
            root_path: str,
            max_depth: Optional[int] = None,
            should_stop: Optional[Callable[[], bool]] = None,
            generated_at: Optional[datetime] = None) -> TraversalResult:
        """
        Runs one export traversal.

        Modules that cannot be opened are skipped. Links into modules beyond
        max_depth are kept as references; those modules are not exported.

        max_depth counts hops from the root: a peer is admitted when its depth
        (one more than the module that links to it) is at most max_depth. So
        max_depth=0 exports the root alone and max_depth=1 also exports the
        root's direct neighbours. A root-only export needs
        max_depth=0, not 1.

        :param root_path: Path of the root module (depth 0)
        :param max_depth: Hop bound; defaults to the configured option
        :param should_stop: Polled between modules; True abandons the rest of the queue
        :param generated_at: Export timestamp; defaults to now
        :return: Export document and traversal report
        """
        if max_depth is None:
            max_depth = self.options.max_depth
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
            raise ValueError(f"max_depth must be a non-negative integer, got {max_depth!r}")

        root_path = self.accessor.normalize(root_path)
        visited: Set[str] = {root_path}
        queue: Deque[Tuple[str, int]] = deque([(root_path, 0)])
        modules: List[ExportedModule] = []
        report = TraversalReport()

        logger.info(f"Exporting {root_path} with max depth {max_depth}")

        while queue:
            if should_stop is not None and should_stop():
                report.cancelled = True
                logger.warning(f"Export cancelled; {len(queue)} queued module(s) not processed")
                break

            path, depth = queue.popleft()
            logger.info(f"Processing module {path} (depth {depth}, {len(queue)} queued)")
            try:
                module, warnings = self.process_module(path, depth)
            except ModuleOpenError as e:
                logger.warning(f"Skipping module {path}: {e}")
                report.skipped_modules.append(SkippedModule(path=path, depth=depth, reason=str(e)))
                continue

            report.link_warnings.extend(warnings)

            for peer in self.peer_modules(module):
                if peer in visited or depth + 1 > max_depth:
                    continue
                # reserve on discovery so later references do not enqueue it again
                visited.add(peer)
                queue.append((peer, depth + 1))
                logger.debug(f"Queued {peer} at depth {depth + 1} (found in {path})")

            modules.append(module)

        for module in modules:
            objects = list(iter_preorder(module.objects))
            report.object_count += len(objects)
            report.link_count += sum(len(obj.links) for obj in objects)
        report.module_count = len(modules)

        logger.info(f"Export finished: {report.to_dict()}")

        document = self.assembler.assemble(modules, root_path, max_depth, generated_at)
        return TraversalResult(document=document, report=report)

    def process_module(self, path: str, depth: int) -> Tuple[ExportedModule, List[LinkWarning]]:
        """
        Opens one module, walks its hierarchy and closes it again.

        :raises ModuleOpenError: the module could not be opened
        """
        with self.accessor.opened(path) as handle:
            walk = self.walker.build(
                self.accessor.objects(handle),
                module_path=path,
                resolve=partial(self.accessor.resolve, handle)
            )
            name = handle.name

        module = ExportedModule(path=path, name=name, depth=depth, objects=walk.objects)
        return module, walk.warnings

    @staticmethod
    def peer_modules(module: ExportedModule) -> List[str]:
        """Distinct modules named by any link in the module, in document order."""
        seen: Set[str] = set()
        peers: List[str] = []
        for obj in iter_preorder(module.objects):
            for link in obj.links:
                if link.peer_module != module.path and link.peer_module not in seen:
                    seen.add(link.peer_module)
                    peers.append(link.peer_module)
        return peers
