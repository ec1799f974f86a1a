"""Domain models for the payment interval analyzer.

This package contains the domain model classes shared by the reader, the
analysis services and the CLI.
"""

from .analysis import (
    AnalysisContext,
    AnalysisOutcome,
    AnalysisStatus,
    ExportResult,
    SuccessfulIdsOutcome,
)
from .event import INVALID_DATE, NormalizedEvent, RawRow
from .filter_criteria import FilterCriteria
from .interval_result import LONG_INTERVAL_MS, IntervalResult
from .run_result import FileRun, FileRunStatus, RunResult
from .skip_record import SkipRecord

__all__ = [
    # Event models
    "RawRow",
    "NormalizedEvent",
    "INVALID_DATE",
    # Results
    "IntervalResult",
    "LONG_INTERVAL_MS",
    "FilterCriteria",
    # Pipeline context / outcomes
    "AnalysisContext",
    "AnalysisOutcome",
    "AnalysisStatus",
    "ExportResult",
    "SuccessfulIdsOutcome",
    # Batch runs
    "FileRun",
    "FileRunStatus",
    "RunResult",
    # Diagnostics
    "SkipRecord",
]
