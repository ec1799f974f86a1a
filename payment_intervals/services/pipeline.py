from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from ..csvio.reader import MalformedBatchError, read_event_table, read_successful_ids
from ..csvio.source import ReadError, TextAcquirer, acquire_text
from ..logging.skip_log import SkipLogBuffer
from ..models.analysis import (
    AnalysisContext,
    AnalysisOutcome,
    AnalysisStatus,
    SuccessfulIdsOutcome,
)
from ..models.event import NormalizedEvent
from .aggregator import group_by_payment
from .interval_calculator import compute_intervals
from .record_parser import parse_records
from .result_filter import apply_filters

"""Analysis pipeline.

    text -> RawRows -> NormalizedEvents -> PaymentGroups -> IntervalResults -> filtered view

Every function takes an AnalysisContext and returns a new AnalysisOutcome;
nothing is cached between calls, so analyzing a new file always starts from
scratch. Data-quality conditions come back as AnalysisStatus values:

    MALFORMED_BATCH    input is not a table / has no rows
    NO_USABLE_ROWS     no row survived the record parser
    NO_MATCHING_PAIRS  no payment has both statuses in order (informational)
    READ_ERROR         the text could not be acquired

Changing target statuses only needs recompute() (no re-parse); changing
filter criteria only needs refilter().
"""

__all__ = [
    "analyze_text",
    "analyze_source",
    "recompute",
    "refilter",
    "load_successful_ids",
]

logger = logging.getLogger(__name__)

MEMORY_SOURCE = "<memory>"


def _source_name(source: Path | str) -> str:
    return Path(source).name or str(source)


def _derive(
    events: tuple[NormalizedEvent, ...],
    context: AnalysisContext,
    row_count: int,
) -> AnalysisOutcome:
    groups = group_by_payment(events)
    logger.debug(f"found {len(groups)} payment groups")

    results = tuple(compute_intervals(groups, context.from_status, context.to_status))
    filtered = tuple(apply_filters(results, context.criteria, context.successful_ids))

    if results:
        status = AnalysisStatus.OK
        message = ""
    else:
        status = AnalysisStatus.NO_MATCHING_PAIRS
        message = (
            f"No payments found with both status {context.from_status} "
            f"and status {context.to_status} in the correct order."
        )

    return AnalysisOutcome(
        status=status,
        message=message,
        events=events,
        results=results,
        filtered_results=filtered,
        row_count=row_count,
        skipped_rows=row_count - len(events),
        payment_count=len(groups),
    )


def analyze_text(
    text: str,
    context: AnalysisContext | None = None,
    *,
    skip_log: SkipLogBuffer | None = None,
    source: str = MEMORY_SOURCE,
) -> AnalysisOutcome:
    """Run the full pipeline over CSV text."""
    context = context or AnalysisContext()
    try:
        raw_rows = read_event_table(text)
    except MalformedBatchError as e:
        return AnalysisOutcome(
            status=AnalysisStatus.MALFORMED_BATCH,
            message=f"Error parsing CSV: {e}",
        )

    events = tuple(
        parse_records(
            raw_rows,
            skip_log=skip_log,
            source=source,
            date_format=context.date_format,
        )
    )
    logger.debug(f"processed {len(events)}/{len(raw_rows)} rows successfully")

    if not events:
        return AnalysisOutcome(
            status=AnalysisStatus.NO_USABLE_ROWS,
            message="No valid data could be processed from the CSV. Please check the format.",
            row_count=len(raw_rows),
            skipped_rows=len(raw_rows),
        )

    return _derive(events, context, len(raw_rows))


def analyze_source(
    source: Path,
    context: AnalysisContext | None = None,
    *,
    acquire: TextAcquirer = acquire_text,
    skip_log: SkipLogBuffer | None = None,
) -> AnalysisOutcome:
    """Acquire the text of `source` and analyze it."""
    try:
        text = acquire(source)
    except ReadError as e:
        return AnalysisOutcome(
            status=AnalysisStatus.READ_ERROR,
            message=f"Error reading file: {e}",
        )
    return analyze_text(text, context, skip_log=skip_log, source=_source_name(source))


def recompute(outcome: AnalysisOutcome, context: AnalysisContext) -> AnalysisOutcome:
    """Re-run grouping, intervals and filtering on already parsed events.

    Outcomes without events (read/parse failures) are returned unchanged.
    """
    if not outcome.events:
        return outcome
    return _derive(outcome.events, context, outcome.row_count)


def refilter(outcome: AnalysisOutcome, context: AnalysisContext) -> AnalysisOutcome:
    """Rebuild only the filtered view; `results` is carried over as is."""
    filtered = tuple(apply_filters(outcome.results, context.criteria, context.successful_ids))
    return replace(outcome, filtered_results=filtered)


def load_successful_ids(
    source: Path, *, acquire: TextAcquirer = acquire_text
) -> SuccessfulIdsOutcome:
    """Load the successful payment allow-set from a secondary CSV.

    A file without any id is reported as NO_USABLE_ROWS and carries no set,
    so callers keep whatever set was active before.
    """
    try:
        text = acquire(source)
    except ReadError as e:
        return SuccessfulIdsOutcome(
            status=AnalysisStatus.READ_ERROR,
            message=f"Error reading successful payments file: {e}",
        )
    try:
        ids = read_successful_ids(text)
    except MalformedBatchError as e:
        return SuccessfulIdsOutcome(
            status=AnalysisStatus.MALFORMED_BATCH,
            message=f"Error parsing successful payments CSV: {e}",
        )
    if not ids:
        return SuccessfulIdsOutcome(
            status=AnalysisStatus.NO_USABLE_ROWS,
            message="No valid payment IDs found in the file",
        )
    return SuccessfulIdsOutcome(status=AnalysisStatus.OK, ids=ids)
