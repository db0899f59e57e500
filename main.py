import argparse
import asyncio
import logging
import signal
import sys
import threading
from typing import List, Optional

from config import config
from module_export.exceptions import SerializationError
from module_export.traversal import ExportOptions, JsonDirectoryAccessor, ModuleTraverser
from module_export.writer import save_export

logger = logging.getLogger("module_export")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export a module and the modules it links to as one JSON document"
    )
    parser.add_argument("--root", default=config.ROOT_MODULE,
                        help="Path of the root module, e.g. /Project/Requirements")
    parser.add_argument("--max-depth", type=int, default=config.MAX_DEPTH,
                        help="Number of link hops to follow from the root module")
    parser.add_argument("--source-dir", default=config.SOURCE_DIR,
                        help="Directory containing module JSON snapshots")
    parser.add_argument("--output", default=config.OUTPUT_FILE,
                        help="File the export document is written to")
    parser.add_argument("--indent", type=int, default=config.INDENT,
                        help="JSON indentation (0 for compact output)")
    parser.add_argument("--exclude-attribute", action="append", dest="exclude_attributes",
                        default=None, help="Attribute name to leave out (repeatable)")
    parser.add_argument("--link-type", action="append", dest="link_types",
                        default=None, help="Only export links of this type (repeatable)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    args = parser.parse_args(argv)
    if args.max_depth < 0:
        parser.error("--max-depth must not be negative")
    return args


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the module exporter.

    The traversal itself is synchronous and runs in a worker thread, so the
    event loop stays free; the SIGINT handler remains on the main thread.
    """
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Configuration: {config.to_dict()}")

    if not args.root:
        logger.error("No root module given. Pass --root or set EXPORT_ROOT_MODULE.")
        return 1

    options = ExportOptions(
        max_depth=args.max_depth,
        exclude_attributes=args.exclude_attributes or config.EXCLUDE_ATTRIBUTES,
        include_link_types=args.link_types or config.LINK_TYPES or None,
        indent=args.indent or None
    )
    traverser = ModuleTraverser(JsonDirectoryAccessor(args.source_dir), options)

    # Ctrl-C stops between modules; finished modules are still written
    stop = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())

    try:
        result = await asyncio.to_thread(traverser.run, args.root, should_stop=stop.is_set)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    try:
        data = traverser.assembler.serialize(result.document)
    except SerializationError as e:
        logger.error(f"Export aborted: {e}")
        return 1

    output_path = await save_export(data, args.output)

    report = result.report
    logger.info(f"Exported {report.module_count} module(s), {report.object_count} object(s), "
                f"{report.link_count} link(s) to {output_path}")
    for skipped in report.skipped_modules:
        logger.warning(f"Skipped {skipped.path} (depth {skipped.depth}): {skipped.reason}")
    if report.link_warnings:
        logger.warning(f"{len(report.link_warnings)} link(s) could not be resolved")
    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
