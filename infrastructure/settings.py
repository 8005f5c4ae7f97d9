"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULT_SETTINGS: dict[str, Any] = {
    "backend": {
        "kind": "http",
        "base_url": "http://127.0.0.1:34115/api",
        "timeout_seconds": 30,
        "seed_file": None,
    },
    "logging": {"dir": None, "level": "INFO", "console": False},
    "search": {"verify_results": False},
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    Values from the file override `DEFAULT_SETTINGS` key by key.
    """

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = _merge(DEFAULT_SETTINGS, json.load(f))

    @classmethod
    def defaults(cls) -> JsonSettings:
        """Settings object holding only the built-in defaults."""
        inst = cls.__new__(cls)
        inst._path = Path()
        inst._data = _merge(DEFAULT_SETTINGS, {})
        return inst

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get(key, default))
        except (TypeError, ValueError):
            return default
