from .accessor import ModuleAccessor
from .export_options import ExportOptions
from .json_accessor import JsonDirectoryAccessor, normalize_module_path
from .module_traverser import ModuleTraverser

__all__ = [
    'ModuleAccessor',
    'ExportOptions',
    'JsonDirectoryAccessor',
    'normalize_module_path',
    'ModuleTraverser'
]
