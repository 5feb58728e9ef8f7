from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

from postfix_ide.settings_models import default_ide_settings


class SettingsError(ValueError):
    """Raised when a settings key is malformed."""


def deep_merge_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Fill keys missing from ``data`` with ``defaults``; nested sections merge recursively."""
    merged = deepcopy(dict(data))
    for key, default_value in defaults.items():
        current = merged.get(key)
        if key not in merged:
            merged[key] = deepcopy(default_value)
        elif isinstance(current, dict) and isinstance(default_value, dict):
            merged[key] = deep_merge_defaults(current, default_value)
    return merged


def _key_parts(key: str) -> list[str]:
    if not key:
        raise SettingsError("Key cannot be empty.")
    parts = key.split(".")
    if not all(parts):
        raise SettingsError(f"Malformed settings key '{key}'.")
    return parts


def dot_get(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    if not key:
        return data
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def dot_set(data: dict[str, Any], key: str, value: Any) -> None:
    *sections, leaf = _key_parts(key)
    node = data
    for part in sections:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


class SettingsStore:
    """In-memory settings with defaults and dot-key helpers."""

    def __init__(self, data: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None) -> None:
        self.defaults: dict[str, Any] = deepcopy(dict(defaults if defaults is not None else default_ide_settings()))
        self.data: dict[str, Any] = deep_merge_defaults(data or {}, self.defaults)

    def get(self, key: str, default: Any = None) -> Any:
        return dot_get(self.data, key, default)

    def set(self, key: str, value: Any) -> bool:
        current = self.get(key)
        if current == value:
            return False
        dot_set(self.data, key, value)
        return True

    def section(self, key: str) -> dict[str, Any]:
        value = self.get(key, {})
        return deepcopy(value) if isinstance(value, dict) else {}

    def restore_defaults(self) -> None:
        self.data = deepcopy(self.defaults)

    def snapshot(self) -> dict[str, Any]:
        return deepcopy(self.data)
