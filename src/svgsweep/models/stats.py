"""Run statistics and final report dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from svgsweep.errors import FatalError
from svgsweep.models.task import FileResult


class RunState(str, Enum):
    """Lifecycle state of a run."""

    IDLE = "idle"
    SCANNING = "scanning"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FATAL = "fatal"

    @property
    def finished(self) -> bool:
        return self in (RunState.COMPLETED, RunState.CANCELLED, RunState.FATAL)


@dataclass(frozen=True, slots=True)
class RunStats:
    """Aggregate statistics of a run.

    Byte totals cover cleaned files only. Elapsed figures cover every
    processed file and are kept in integer nanoseconds.
    """

    total_count: int = 0
    cleaned_count: int = 0
    crashed_count: int = 0
    size_before_total: int = 0
    size_after_total: int = 0
    elapsed_total_ns: int = 0
    elapsed_min_ns: int | None = None
    elapsed_max_ns: int | None = None

    @property
    def processed_count(self) -> int:
        return self.cleaned_count + self.crashed_count

    @property
    def elapsed_avg_ns(self) -> float | None:
        if not self.processed_count:
            return None
        return self.elapsed_total_ns / self.processed_count

    @property
    def saved_bytes(self) -> int:
        return self.size_before_total - self.size_after_total


@dataclass(slots=True)
class RunReport:
    """Final snapshot handed back to the shell."""

    state: RunState
    stats: RunStats = field(default_factory=RunStats)
    error: FatalError | None = None
    results: list[FileResult] = field(default_factory=list)
