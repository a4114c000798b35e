"""Per-file task and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Outcome(str, Enum):
    """Final state of a single file."""

    CLEANED = "cleaned"
    CRASHED = "crashed"


@dataclass(frozen=True, slots=True)
class FileTask:
    """Single input document discovered by the scanner.

    ``relative_path`` is the path below the scan root and is used to
    mirror sub-folders into a dedicated output folder.
    """

    source_path: Path
    is_compressed_input: bool
    size_before: int
    relative_path: Path


@dataclass(frozen=True, slots=True)
class FileResult:
    """Outcome of processing one FileTask."""

    task: FileTask
    outcome: Outcome
    elapsed_ns: int
    size_after: int | None = None
    destination: Path | None = None
    error: str | None = None

    @property
    def cleaned(self) -> bool:
        return self.outcome is Outcome.CLEANED

    @classmethod
    def crashed(cls, task: FileTask, elapsed_ns: int, error: str) -> FileResult:
        return cls(task=task, outcome=Outcome.CRASHED, elapsed_ns=elapsed_ns, error=error)
