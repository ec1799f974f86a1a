from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .event import NormalizedEvent
from .filter_criteria import FilterCriteria
from .interval_result import IntervalResult

"""Analysis context and outcome models.

The pipeline never keeps state between calls. Everything a run depends on
(target statuses, filter criteria, the optional successful payment set) is
passed in as an AnalysisContext, and everything it derives comes back as a
new AnalysisOutcome.

Batch-level data-quality conditions are not exceptions: they are reported
through AnalysisStatus so callers can show them as distinct states.
"""

__all__ = [
    "AnalysisStatus",
    "AnalysisContext",
    "AnalysisOutcome",
    "SuccessfulIdsOutcome",
    "ExportResult",
    "DEFAULT_FROM_STATUS",
    "DEFAULT_TO_STATUS",
]

DEFAULT_FROM_STATUS = 2
DEFAULT_TO_STATUS = 8


class AnalysisStatus(Enum):
    """Outcome of one pipeline step.

    - OK: results were produced
    - READ_ERROR: input text could not be acquired
    - MALFORMED_BATCH: input is not tabular data or has no rows at all
    - NO_USABLE_ROWS: rows exist but none survived per-row validation
    - NO_MATCHING_PAIRS: no payment has both statuses in the right order
    - EMPTY_EXPORT: export requested with nothing to export
    """
    OK = "ok"
    READ_ERROR = "read_error"
    MALFORMED_BATCH = "malformed_batch"
    NO_USABLE_ROWS = "no_usable_rows"
    NO_MATCHING_PAIRS = "no_matching_pairs"
    EMPTY_EXPORT = "empty_export"


@dataclass(frozen=True)
class AnalysisContext:
    """Explicit inputs of a pipeline run."""
    from_status: int = DEFAULT_FROM_STATUS
    to_status: int = DEFAULT_TO_STATUS
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    successful_ids: frozenset[str] | None = None  # None -> allow-set filter inactive
    date_format: str = "%d/%m/%Y"

    def with_statuses(self, from_status: int, to_status: int) -> AnalysisContext:
        return replace(self, from_status=from_status, to_status=to_status)

    def with_criteria(self, criteria: FilterCriteria) -> AnalysisContext:
        return replace(self, criteria=criteria)

    def with_successful_ids(self, ids: frozenset[str] | None) -> AnalysisContext:
        return replace(self, successful_ids=ids)


@dataclass(frozen=True)
class AnalysisOutcome:
    """Derived collections of one analyzed input.

    `results` is the canonical result set; `filtered_results` is always a
    subset of it built by the result filter.
    """
    status: AnalysisStatus
    message: str = ""
    events: tuple[NormalizedEvent, ...] = ()
    results: tuple[IntervalResult, ...] = ()
    filtered_results: tuple[IntervalResult, ...] = ()
    row_count: int = 0  # data rows read from the table
    skipped_rows: int = 0  # rows dropped by the record parser
    payment_count: int = 0  # distinct payment ids among events

    @property
    def ok(self) -> bool:
        return self.status is AnalysisStatus.OK

    @property
    def long_intervals(self) -> int:
        return sum(1 for r in self.filtered_results if r.is_long)


@dataclass(frozen=True)
class SuccessfulIdsOutcome:
    status: AnalysisStatus
    message: str = ""
    ids: frozenset[str] | None = None


@dataclass(frozen=True)
class ExportResult:
    status: AnalysisStatus
    message: str = ""
    content: str | None = None
    row_count: int = 0
