"""Application settings in ``$XDG_CONFIG_HOME/svgsweep/settings.json``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from svgsweep.storage import read_document, write_document
from svgsweep.utils import xdg_config_home

log = logging.getLogger(__name__)

MAX_THREADS_KEY = "pipeline.max_threads"
RULE_PATHS_KEY = "rules.paths"


def default_settings_path() -> Path:
    return xdg_config_home() / "svgsweep" / "settings.json"


class Settings:
    """Persistent settings backed by a JSON file.

    Keys use dot notation and address nested objects, so
    ``pipeline.max_threads`` lives at ``{"pipeline": {"max_threads": 4}}``.
    Known keys have typed accessors that fall back to their default when
    the stored value is invalid.
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()
        self._data: dict[str, Any] = read_document(self._path)

    @classmethod
    def instance(cls) -> Settings:
        """Return the process-wide settings, loading them on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        *parents, leaf = key.split(".")
        node = self._data
        for part in parents:
            node = node.get(part)
            if not isinstance(node, dict):
                return default
        return node.get(leaf, default)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` and save the file."""
        *parents, leaf = key.split(".")
        node = self._data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value
        try:
            write_document(self._path, self._data)
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)

    @property
    def max_threads(self) -> int | None:
        """Upper bound for worker threads, or None for the CPU count."""
        value = self.get(MAX_THREADS_KEY)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            log.warning("Ignoring '%s': expected a positive integer, got %r", MAX_THREADS_KEY, value)
            return None
        return value

    @property
    def rule_paths(self) -> list[Path]:
        """Extra directories searched for rule modules."""
        value = self.get(RULE_PATHS_KEY, [])
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            log.warning("Ignoring '%s': expected a list of paths, got %r", RULE_PATHS_KEY, value)
            return []
        return [Path(p).expanduser() for p in value]
