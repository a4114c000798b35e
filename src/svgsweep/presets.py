"""Named, persisted run configurations."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from svgsweep.errors import (
    CannotRemoveDefault,
    InvalidConfig,
    NameRequired,
    PresetError,
    PresetExists,
    PresetNotFound,
)
from svgsweep.models.config import RunConfig
from svgsweep.storage import read_document, write_document
from svgsweep.utils import xdg_config_home

log = logging.getLogger(__name__)

DEFAULT_PRESET = "default"

_PRESETS_FILE = "presets.json"


def default_presets_path() -> Path:
    return xdg_config_home() / "svgsweep" / _PRESETS_FILE


def builtin_default() -> RunConfig:
    """Config of the default preset until the user saves their own."""
    return RunConfig(thread_count=os.cpu_count() or 1)


@dataclass(frozen=True, slots=True)
class Preset:
    """A named RunConfig."""

    name: str
    config: RunConfig


class PresetStore:
    """JSON-backed preset store.

    Each instance owns one file, so tests and callers can keep isolated
    stores. The ``default`` preset always exists: it is synthesized from
    ``builtin_default()`` until explicitly overwritten, and can never be removed.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_presets_path()
        self._presets: dict[str, dict[str, Any]] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def save(self, name: str, config: RunConfig, *, overwrite: bool = False) -> Preset:
        """Store ``config`` under ``name``.

        Raises:
            NameRequired: if ``name`` is empty.
            PresetExists: if ``name`` exists and ``overwrite`` is False.
        """
        name = name.strip()
        if not name:
            raise NameRequired("You must set a preset name")
        if name in self and not overwrite:
            raise PresetExists(f"Preset '{name}' already exists")
        self._presets[name] = config.to_dict()
        self._save()
        log.info("Saved preset '%s'", name)
        return Preset(name=name, config=config)

    def remove(self, name: str) -> None:
        """Delete a preset.

        Raises:
            CannotRemoveDefault: for the reserved default preset.
            PresetNotFound: if no preset has this name.
        """
        if name == DEFAULT_PRESET:
            raise CannotRemoveDefault("The default preset cannot be removed")
        if name not in self._presets:
            raise PresetNotFound(f"Preset '{name}' not found")
        del self._presets[name]
        self._save()
        log.info("Removed preset '%s'", name)

    def get(self, name: str) -> RunConfig:
        """Return the config stored under ``name``.

        Raises:
            PresetNotFound: if no preset has this name.
        """
        if name == DEFAULT_PRESET and name not in self._presets:
            return builtin_default()
        try:
            data = self._presets[name]
        except KeyError:
            raise PresetNotFound(f"Preset '{name}' not found") from None
        return RunConfig.from_dict(data)

    def list(self) -> list[Preset]:
        """Return all presets: default first, then the rest sorted by name.

        Presets whose stored config is malformed are skipped.
        """
        names = [DEFAULT_PRESET] + sorted(n for n in self._presets if n != DEFAULT_PRESET)
        presets: list[Preset] = []
        for name in names:
            try:
                presets.append(Preset(name=name, config=self.get(name)))
            except InvalidConfig as exc:
                log.warning("Skipping malformed preset '%s': %s", name, exc)
        return presets

    def __contains__(self, name: str) -> bool:
        return name == DEFAULT_PRESET or name in self._presets

    def _load(self) -> None:
        presets = read_document(self._path).get("presets", {})
        if not isinstance(presets, dict):
            log.warning("Ignoring malformed presets file: %s", self._path)
            return
        self._presets = {str(k): v for k, v in presets.items() if isinstance(v, dict)}

    def _save(self) -> None:
        try:
            write_document(self._path, {"presets": self._presets})
        except OSError as e:
            raise PresetError(f"Cannot write presets to {self._path}: {e}") from e
