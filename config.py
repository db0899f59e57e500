import os
from dotenv import load_dotenv
from typing import Dict, Any, List

# Load environment variables from .env file
load_dotenv()


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Config:
    """Central configuration management for the module exporter."""

    # Source and output
    SOURCE_DIR: str = os.getenv("EXPORT_SOURCE_DIR", "process/modules")
    ROOT_MODULE: str = os.getenv("EXPORT_ROOT_MODULE", "")
    OUTPUT_FILE: str = os.getenv("EXPORT_OUTPUT_FILE", "process/export/module_export.json")

    # Traversal settings
    MAX_DEPTH: int = int(os.getenv("EXPORT_MAX_DEPTH", "2"))
    EXCLUDE_ATTRIBUTES: List[str] = _split_list(os.getenv("EXPORT_EXCLUDE_ATTRIBUTES", ""))
    LINK_TYPES: List[str] = _split_list(os.getenv("EXPORT_LINK_TYPES", ""))

    # Output formatting and logging
    INDENT: int = int(os.getenv("EXPORT_INDENT", "2"))
    LOG_LEVEL: str = os.getenv("EXPORT_LOG_LEVEL", "INFO").upper()

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Return configuration as a dictionary for logging/debugging."""
        return {
            "SOURCE_DIR": cls.SOURCE_DIR,
            "ROOT_MODULE": cls.ROOT_MODULE,
            "OUTPUT_FILE": cls.OUTPUT_FILE,
            "MAX_DEPTH": cls.MAX_DEPTH,
            "EXCLUDE_ATTRIBUTES": cls.EXCLUDE_ATTRIBUTES,
            "LINK_TYPES": cls.LINK_TYPES,
            "INDENT": cls.INDENT,
            "LOG_LEVEL": cls.LOG_LEVEL
        }

# Initialize on import
config = Config()
