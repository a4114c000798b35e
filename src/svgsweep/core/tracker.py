"""Tracks cleaning runs across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from svgsweep.models.stats import RunReport, RunState
from svgsweep.storage import load_history, save_history

log = logging.getLogger(__name__)

_PERIOD_DAYS = {"today": 0, "week": 7, "month": 30}


class Tracker:
    """Persists a summary of every finished run and aggregates them."""

    def record(self, report: RunReport) -> None:
        """Append a finished run to the history.

        Fatal runs never processed a file and are not recorded.
        """
        if report.state is RunState.FATAL:
            return

        history = load_history()
        entry = _build_entry(report)
        history["runs"].append(entry)
        save_history(history)
        log.info(
            "Saved run: %d files cleaned, %d bytes saved",
            entry["cleaned"],
            entry["bytes_before"] - entry["bytes_after"],
        )

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Aggregate recorded runs.

        Args:
            period: 'today', 'week' (7 days), 'month' (30 days) or 'all'.
        """
        all_runs = load_history()["runs"]
        cutoff = _period_start(period)
        runs = all_runs if cutoff is None else [
            r for r in all_runs if datetime.fromisoformat(r["timestamp"]) >= cutoff
        ]

        before = sum(r.get("bytes_before", 0) for r in runs)
        after = sum(r.get("bytes_after", 0) for r in runs)
        return {
            "period": period,
            "run_count": len(runs),
            "files_cleaned": sum(r.get("cleaned", 0) for r in runs),
            "files_crashed": sum(r.get("crashed", 0) for r in runs),
            "bytes_before": before,
            "bytes_after": after,
            "bytes_saved": before - after,
            "lifetime_bytes_saved": sum(_run_saved(r) for r in all_runs),
            "last_run": all_runs[-1]["timestamp"] if all_runs else None,
        }


def _build_entry(report: RunReport) -> dict[str, Any]:
    stats = report.stats
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "state": report.state.value,
        "total": stats.total_count,
        "cleaned": stats.cleaned_count,
        "crashed": stats.crashed_count,
        "bytes_before": stats.size_before_total,
        "bytes_after": stats.size_after_total,
    }


def _run_saved(run: dict[str, Any]) -> int:
    return run.get("bytes_before", 0) - run.get("bytes_after", 0)


def _period_start(period: str) -> datetime | None:
    """Return the earliest timestamp included in ``period`` (UTC), or None for all."""
    days = _PERIOD_DAYS.get(period)
    if days is None:
        return None
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return today - timedelta(days=days)
