"""Order-independent accumulation of run statistics."""

from __future__ import annotations

from svgsweep.models.stats import RunStats
from svgsweep.models.task import FileResult


class StatsAggregator:
    """Folds FileResults into RunStats.

    Every update is a counter increment, an integer sum or a min/max, so
    the snapshot does not depend on the order results arrive in. The
    aggregator is not locked: exactly one thread may call ``add()``.
    """

    def __init__(self, total: int = 0) -> None:
        self.begin(total)

    def begin(self, total: int) -> None:
        """Reset and set the number of scanned tasks."""
        self._total = total
        self._cleaned = 0
        self._crashed = 0
        self._before = 0
        self._after = 0
        self._elapsed_total = 0
        self._elapsed_min: int | None = None
        self._elapsed_max: int | None = None

    def add(self, result: FileResult) -> None:
        if result.cleaned:
            self._cleaned += 1
            self._before += result.task.size_before
            self._after += result.size_after or 0
        else:
            self._crashed += 1

        elapsed = result.elapsed_ns
        self._elapsed_total += elapsed
        if self._elapsed_min is None or elapsed < self._elapsed_min:
            self._elapsed_min = elapsed
        if self._elapsed_max is None or elapsed > self._elapsed_max:
            self._elapsed_max = elapsed

    def snapshot(self) -> RunStats:
        return RunStats(
            total_count=self._total,
            cleaned_count=self._cleaned,
            crashed_count=self._crashed,
            size_before_total=self._before,
            size_after_total=self._after,
            elapsed_total_ns=self._elapsed_total,
            elapsed_min_ns=self._elapsed_min,
            elapsed_max_ns=self._elapsed_max,
        )
