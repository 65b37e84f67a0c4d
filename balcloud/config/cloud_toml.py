"""
Typed lookups over the ``Cloud.toml`` override document.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from balcloud.errors import BuildError

logger = logging.getLogger(__name__)

CLOUD_TOML = "Cloud.toml"

_MISSING = object()


class CloudToml:
    """Dotted-key access with defaults; wrong value types are build errors."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, source: Optional[Path] = None):
        self.data = data or {}
        self.source = source

    def __bool__(self) -> bool:
        return bool(self.data)

    def _lookup(self, key: str) -> Any:
        node: Any = self.data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def _typed(self, key: str, expected: type, label: str, default: Any) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            return default
        # bool is an int subclass in Python
        if expected is int and isinstance(value, bool):
            raise BuildError(f"invalid value for '{key}' in {self._where()}: expected {label}")
        if not isinstance(value, expected):
            raise BuildError(f"invalid value for '{key}' in {self._where()}: expected {label}")
        return value

    def _where(self) -> str:
        return str(self.source) if self.source else CLOUD_TOML

    def contains(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._typed(key, str, "a string", default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._typed(key, int, "an integer", default)

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._typed(key, bool, "a boolean", default)

    def get_tables(self, key: str) -> List[Dict[str, Any]]:
        """Entries of an array of tables such as ``[[container.copy.files]]``."""
        tables = self._typed(key, list, "an array of tables", [])
        for entry in tables:
            if not isinstance(entry, dict):
                raise BuildError(f"invalid value for '{key}' in {self._where()}: expected an array of tables")
        return tables


def load_cloud_toml(path: Optional[str | Path]) -> CloudToml:
    """Read the override document; a missing file yields an empty one."""
    if path is None:
        return CloudToml()
    toml_path = Path(path)
    if not toml_path.is_file():
        logger.info(f"No {CLOUD_TOML} found at {toml_path}; using defaults")
        return CloudToml(source=toml_path)
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise BuildError(f"unable to parse {toml_path}", e) from e
    except OSError as e:
        raise BuildError(f"unable to read {toml_path}", e) from e
    logger.info(f"Loaded overrides from {toml_path}")
    return CloudToml(data, toml_path)
