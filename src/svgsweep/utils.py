"""Shared utility functions."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

_BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def bytes_to_human(size_bytes: int) -> str:
    """Format a byte count with binary units, e.g. ``1.5 KiB``."""
    sign = "-" if size_bytes < 0 else ""
    value = float(abs(size_bytes))
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{sign}{int(value)} B"
    return f"{sign}{value:.1f} {_BYTE_UNITS[unit]}"


def format_duration(nanoseconds: float) -> str:
    """Format a duration given in nanoseconds, e.g. ``850 µs``, ``12 ms`` or ``1m 4s``."""
    if nanoseconds < 1_000_000:
        return f"{nanoseconds / 1000:.0f} µs"
    seconds = nanoseconds / 1_000_000_000
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def saved_ratio(before: int, after: int) -> float:
    """Return the size reduction in percent (negative when the output grew)."""
    if before <= 0:
        return 0.0
    return (before - after) * 100.0 / before


_AGO_STEPS = (
    (365 * 86400, "year"),
    (30 * 86400, "month"),
    (86400, "day"),
    (3600, "hour"),
    (60, "minute"),
)


def time_ago(iso_timestamp: str) -> str:
    """Describe an ISO timestamp relative to now, e.g. ``3 days ago``."""
    seconds = (datetime.now(timezone.utc) - datetime.fromisoformat(iso_timestamp)).total_seconds()
    for length, unit in _AGO_STEPS:
        if seconds >= length:
            count = int(seconds // length)
            return f"{count} {unit}{'' if count == 1 else 's'} ago"
    return "just now"
