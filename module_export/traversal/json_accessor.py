import json
import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from module_export.exceptions import LinkResolutionError, ModuleOpenError
from module_export.extraction.data_models import (
    AttributeValue,
    FlatObject,
    LinkEndpoint,
    ModuleHandle,
    RawRelationship,
    ResolvedEndpoint,
)
from module_export.traversal.accessor import ModuleAccessor

logger = logging.getLogger(__name__)


def normalize_module_path(path: str, base: Optional[str] = None) -> str:
    """
    Builds an absolute module path.

    :param path: Absolute ("/Project/Reqs") or relative ("../Design") module path
    :param base: Module the relative path is written in
    :return: Normalized absolute path
    """
    path = path.strip()
    if not path.startswith("/") and base:
        path = posixpath.join(posixpath.dirname(base), path)
    return posixpath.normpath("/" + path.lstrip("/"))


class JsonDirectoryAccessor(ModuleAccessor):
    """
    Reads module snapshots from a directory of JSON files.

    Module "/Project/Reqs" is read from "<source_dir>/Project/Reqs.json". A
    sibling "Reqs.json.lock" marks the module as exclusively locked.
    """

    LOCK_SUFFIX = ".lock"

    def __init__(self, source_dir: Union[str, Path]):
        self.source_dir = Path(source_dir)
        self._open: Dict[str, List[FlatObject]] = {}

    def normalize(self, path: str) -> str:
        return normalize_module_path(path)

    def module_file(self, path: str) -> Path:
        """Maps a module path to its snapshot file."""
        normalized = normalize_module_path(path)
        if normalized == "/":
            raise ModuleOpenError("Empty module path", {"path": path})

        root = self.source_dir.resolve()
        file_path = (root / f"{normalized.lstrip('/')}.json").resolve()
        if not file_path.is_relative_to(root):
            raise ModuleOpenError(f"Module path escapes the source directory: {path}", {"path": path})
        return file_path

    def open(self, path: str) -> ModuleHandle:
        normalized = normalize_module_path(path)
        file_path = self.module_file(normalized)

        if not file_path.is_file():
            raise ModuleOpenError(f"Module not found: {normalized}", {"path": normalized, "file": str(file_path)})
        if file_path.with_name(file_path.name + self.LOCK_SUFFIX).exists():
            raise ModuleOpenError(f"Module is exclusively locked: {normalized}", {"path": normalized})

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ModuleOpenError(f"Could not read module {normalized}: {e}", {"path": normalized}) from e

        try:
            objects = [self._parse_object(raw) for raw in data.get("objects", [])]
            name = data.get("name") or posixpath.basename(normalized)
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            raise ModuleOpenError(f"Malformed module file for {normalized}: {e}", {"path": normalized}) from e

        self._open[normalized] = objects
        logger.debug(f"Opened {normalized} ({len(objects)} objects) from {file_path}")
        return ModuleHandle(path=normalized, name=str(name))

    def objects(self, handle: ModuleHandle) -> List[FlatObject]:
        try:
            return list(self._open[handle.path])
        except KeyError:
            raise ModuleOpenError(f"Module is not open: {handle.path}", {"path": handle.path})

    def resolve(self, handle: ModuleHandle, endpoint: LinkEndpoint) -> ResolvedEndpoint:
        if not endpoint.module or not endpoint.object_id:
            raise LinkResolutionError(
                "link target is missing its module or object id",
                {"module": endpoint.module, "object_id": endpoint.object_id}
            )
        return ResolvedEndpoint(
            module=normalize_module_path(endpoint.module, handle.path),
            object_id=endpoint.object_id
        )

    def close(self, handle: ModuleHandle) -> None:
        self._open.pop(handle.path, None)

    @staticmethod
    def _parse_object(raw: Dict[str, Any]) -> FlatObject:
        return FlatObject(
            identifier=str(raw["id"]),
            level=raw.get("level", 1),
            attributes=[
                AttributeValue(name=a["name"], kind=a.get("type", "text"), raw_value=a.get("value"))
                for a in raw.get("attributes", [])
            ],
            out_links=[JsonDirectoryAccessor._parse_relationship(r) for r in raw.get("outLinks", [])],
            in_links=[JsonDirectoryAccessor._parse_relationship(r) for r in raw.get("inLinks", [])]
        )

    @staticmethod
    def _parse_relationship(raw: Dict[str, Any]) -> RawRelationship:
        return RawRelationship(
            link_type=str(raw.get("type", "")),
            targets=[
                LinkEndpoint(
                    module=target.get("module"),
                    object_id=None if target.get("object") is None else str(target.get("object"))
                )
                for target in raw.get("targets", [])
            ]
        )
