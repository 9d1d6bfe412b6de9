"""RoadSearch Settings - Analysis Settings Tree.

Index settings are a nested mapping. Flat dotted keys such as
``index.analysis.analyzer.my_combo.type`` are expanded into the same tree,
so both spellings can be mixed.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ANALYSIS_PREFIX = "index.analysis"


class AnalysisConfigurationError(ValueError):
    """Raised when analysis settings are missing or malformed."""


def _merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _expand(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand dotted keys into nested dictionaries."""
    tree: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = _expand(value)
        node = tree
        parts = str(key).split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise AnalysisConfigurationError(
                    f"Setting [{key}] conflicts with a scalar value at [{part}]"
                )
        leaf = parts[-1]
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            _merge(node[leaf], value)
        else:
            node[leaf] = value
    return tree


class Settings:
    """Read-only view over a settings subtree."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = _expand(data or {})

    @classmethod
    def from_json_file(cls, path: str) -> "Settings":
        """Load settings from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"Loaded settings from {path}")
        return cls(data)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not None

    def __repr__(self) -> str:
        return f"Settings({self._data!r})"

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw value by dotted key."""
        value = self._lookup(key)
        return default if value is None else value

    def get_as_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._lookup(key)
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            raise AnalysisConfigurationError(f"Setting [{key}] must be a string, got {value!r}")
        return str(value)

    def get_as_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._lookup(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise AnalysisConfigurationError(
                f"Setting [{key}] must be an integer, got {value!r}"
            ) from e

    def get_as_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        """Get a boolean; accepts real booleans and "true"/"false" strings."""
        value = self._lookup(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise AnalysisConfigurationError(f"Setting [{key}] must be a boolean, got {value!r}")

    def get_as_list(self, key: str) -> Optional[List[str]]:
        """Get a list of strings.

        A comma-separated string is split into its items. Returns None when
        the key is absent.
        """
        value = self._lookup(key)
        if value is None:
            return None
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise AnalysisConfigurationError(f"Setting [{key}] must be a list, got {value!r}")

    def get_by_prefix(self, prefix: str) -> "Settings":
        """Get the subtree below ``prefix``."""
        node = self._lookup(prefix)
        if node is None:
            return Settings()
        if not isinstance(node, dict):
            raise AnalysisConfigurationError(f"Setting [{prefix}] must be an object")
        return Settings(node)

    def get_groups(self, prefix: str) -> Dict[str, "Settings"]:
        """Get the named groups below ``prefix``, in declaration order."""
        node = self._lookup(prefix)
        if node is None:
            return {}
        if not isinstance(node, dict):
            raise AnalysisConfigurationError(f"Setting [{prefix}] must be an object")
        groups = {}
        for name, group in node.items():
            if not isinstance(group, dict):
                raise AnalysisConfigurationError(
                    f"Setting [{prefix}.{name}] must be an object, got {group!r}"
                )
            groups[name] = Settings(group)
        return groups

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Iterate over the top-level entries."""
        return iter(self._data.items())

    def analysis(self) -> "Settings":
        """Get the analysis section, with or without the ``index.`` wrapper."""
        if self._lookup(ANALYSIS_PREFIX) is not None:
            return self.get_by_prefix(ANALYSIS_PREFIX)
        return self.get_by_prefix("analysis")


__all__ = [
    "ANALYSIS_PREFIX",
    "AnalysisConfigurationError",
    "Settings",
]
