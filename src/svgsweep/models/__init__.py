"""svgsweep data models."""

from svgsweep.models.config import (
    CleanOptions,
    CompressionSpec,
    NamingMode,
    NamingPolicy,
    RunConfig,
)
from svgsweep.models.rule import CleanRule, ElementRule, RuleContext
from svgsweep.models.stats import RunReport, RunState, RunStats
from svgsweep.models.task import FileResult, FileTask, Outcome

__all__ = [
    "CleanOptions",
    "CleanRule",
    "CompressionSpec",
    "ElementRule",
    "FileResult",
    "FileTask",
    "NamingMode",
    "NamingPolicy",
    "Outcome",
    "RuleContext",
    "RunConfig",
    "RunReport",
    "RunState",
    "RunStats",
]
