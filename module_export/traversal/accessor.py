from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator

from module_export.extraction.data_models import FlatObject, LinkEndpoint, ModuleHandle, ResolvedEndpoint


class ModuleAccessor(ABC):
    """Read-only access to the modules of a document-management host."""

    @abstractmethod
    def open(self, path: str) -> ModuleHandle:
        """
        Opens a module read-only.

        :param path: Module path
        :return: Handle for the open module
        :raises ModuleOpenError: path invalid, module missing, or exclusively locked
        """
        pass

    @abstractmethod
    def objects(self, handle: ModuleHandle) -> Iterable[FlatObject]:
        """Returns the module's objects in native order, each carrying its level."""
        pass

    @abstractmethod
    def resolve(self, handle: ModuleHandle, endpoint: LinkEndpoint) -> ResolvedEndpoint:
        """
        Resolves the far end of a relationship to its owning module and object id.

        :raises LinkResolutionError: the endpoint is dangling
        """
        pass

    @abstractmethod
    def close(self, handle: ModuleHandle) -> None:
        """Releases the module."""
        pass

    def normalize(self, path: str) -> str:
        """Returns the canonical form of a module path."""
        return path

    @contextmanager
    def opened(self, path: str) -> Iterator[ModuleHandle]:
        """Opens a module for the duration of a with-block and always closes it."""
        handle = self.open(path)
        try:
            yield handle
        finally:
            self.close(handle)
