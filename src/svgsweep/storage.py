"""JSON documents on disk: the run history and the shared read/write helpers.

Every file svgsweep persists (settings, presets, history) is a single
JSON object. Writes go through a temp file in the same directory, so a
crash mid-write leaves the previous version intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from svgsweep.utils import xdg_data_home

log = logging.getLogger(__name__)

_DATA_DIR = xdg_data_home() / "svgsweep"

HISTORY_FILE = _DATA_DIR / "history.json"


def read_document(path: Path) -> dict[str, Any]:
    """Return the JSON object stored at ``path``.

    A missing, unreadable or non-object file yields an empty dict; the
    last two cases are logged.
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        log.warning("Could not read %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return data


def write_document(path: Path, data: dict[str, Any]) -> None:
    """Atomically replace ``path`` with ``data``.

    Raises:
        OSError: if the directory or the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    finally:
        Path(tmp_name).unlink(missing_ok=True)


def load_history() -> dict[str, Any]:
    """Load the run history as ``{"runs": [...]}``."""
    data = read_document(HISTORY_FILE)
    if not isinstance(data.get("runs"), list):
        if data:
            log.warning("Ignoring malformed history file: %s", HISTORY_FILE)
        return {"runs": []}
    return data


def save_history(data: dict[str, Any]) -> None:
    """Write the run history. Failures are logged, never raised."""
    try:
        write_document(HISTORY_FILE, data)
    except OSError:
        log.exception("Failed to save history file: %s", HISTORY_FILE)
