from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AnalyzerConfig
from ..csvio.source import TextAcquirer, acquire_text
from ..logging.skip_log import SkipLogBuffer
from ..models.analysis import AnalysisContext, AnalysisOutcome, AnalysisStatus
from ..models.run_result import FileRun, FileRunStatus, RunResult
from .csv_exporter import export_results, write_export
from .pipeline import analyze_source, load_successful_ids
from .progress import ProgressTracker
from .result_filter import available_dates
from .summary import render_file_line

"""Batch orchestration.

Analyzes every input file as an independent run (nothing is carried from one
file to the next except the successful payment set), exports each file's
filtered results, and aggregates the numbers for the SUMMARY line.

File status mapping:
    OK                                   -> success
    NO_USABLE_ROWS / NO_MATCHING_PAIRS   -> empty
    READ_ERROR / MALFORMED_BATCH         -> failed
"""

__all__ = [
    "ProcessingError",
    "scan_csv_files",
    "context_from_config",
    "process_all",
]

logger = logging.getLogger(__name__)

_EMPTY_STATES = {AnalysisStatus.NO_USABLE_ROWS, AnalysisStatus.NO_MATCHING_PAIRS}


class ProcessingError(Exception):
    """Fatal error that prevents a batch run from starting."""


def scan_csv_files(directory: Path) -> list[Path]:
    """Sorted .csv files directly under directory (non-recursive).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def context_from_config(config: AnalyzerConfig) -> AnalysisContext:
    return AnalysisContext(
        from_status=config.from_status,
        to_status=config.to_status,
        criteria=config.filters,
        date_format=config.date_format,
    )


def _file_status(outcome: AnalysisOutcome) -> FileRunStatus:
    if outcome.ok:
        return FileRunStatus.SUCCESS
    if outcome.status in _EMPTY_STATES:
        return FileRunStatus.EMPTY
    return FileRunStatus.FAILED


def _resolve_successful_ids(
    config: AnalyzerConfig, context: AnalysisContext, acquire: TextAcquirer
) -> AnalysisContext:
    if context.successful_ids is not None or not config.successful_payments_file:
        return context
    ids_outcome = load_successful_ids(Path(config.successful_payments_file), acquire=acquire)
    if ids_outcome.status is not AnalysisStatus.OK:
        logger.warning(f"successful payments: {ids_outcome.message}")
        return context
    logger.info(f"loaded {len(ids_outcome.ids or ())} successful payment id(s)")
    return context.with_successful_ids(ids_outcome.ids)


def _analyze_file(
    path: Path,
    config: AnalyzerConfig,
    context: AnalysisContext,
    acquire: TextAcquirer,
    skip_log: SkipLogBuffer,
    now: datetime | None,
) -> FileRun:
    started = datetime.now(UTC)
    outcome = analyze_source(path, context, acquire=acquire, skip_log=skip_log)
    status = _file_status(outcome)
    message = outcome.message
    export_path: Path | None = None

    if outcome.ok:
        if config.export:
            export = export_results(outcome.filtered_results)
            if export.status is AnalysisStatus.OK and export.content is not None:
                try:
                    export_path = write_export(
                        export.content, Path(config.export_directory), now=now, label=path.stem
                    )
                except OSError as e:
                    logger.error(f"{path.name}: export failed: {e}")
                    status = FileRunStatus.FAILED
                    message = f"export failed: {e}"
            else:
                logger.warning(f"{path.name}: {export.message}")
    else:
        logger.warning(f"{path.name}: {outcome.message}")

    return FileRun(
        file_name=path.name,
        status=status,
        analysis_status=outcome.status.value,
        rows=outcome.row_count,
        events=len(outcome.events),
        results=len(outcome.results),
        filtered=len(outcome.filtered_results),
        long_intervals=outcome.long_intervals,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        export_path=export_path,
        message=message,
        dates=tuple(available_dates(outcome.results)),
    )


def process_all(
    config: AnalyzerConfig,
    inputs: Sequence[Path] | None = None,
    context: AnalysisContext | None = None,
    *,
    acquire: TextAcquirer = acquire_text,
    skip_log: SkipLogBuffer | None = None,
    now: datetime | None = None,
) -> RunResult:
    """Analyze all input files and return aggregated run results.

    Args:
        config: Analyzer configuration
        inputs: Explicit input files (None = scan config.source_directory)
        context: Statuses / criteria / allow-set (None = from config)
        acquire: Text acquisition callable
        skip_log: Skip record buffer (None = new buffer flushed to ./logs)
        now: Fixed clock for export file names (tests)

    Raises:
        ProcessingError: source directory missing or unreadable
    """
    start_time = datetime.now(UTC)
    skip_log = skip_log if skip_log is not None else SkipLogBuffer()

    file_paths = list(inputs) if inputs is not None else scan_csv_files(Path(config.source_directory))
    context = _resolve_successful_ids(config, context or context_from_config(config), acquire)

    file_runs: list[FileRun] = []
    counts = {s: 0 for s in FileRunStatus}
    total_rows = 0
    total_results = 0
    exported = 0

    with ProgressTracker(len(file_paths)) as progress:
        for path in file_paths:
            progress.start_file(path)
            run = _analyze_file(path, config, context, acquire, skip_log, now)
            file_runs.append(run)
            logger.info(render_file_line(run))

            counts[run.status] += 1
            total_rows += run.rows
            total_results += run.results
            if run.export_path is not None:
                exported += 1

            progress.set_postfix(
                success=counts[FileRunStatus.SUCCESS],
                empty=counts[FileRunStatus.EMPTY],
                failed=counts[FileRunStatus.FAILED],
            )
            progress.finish_file()

    skipped = len(skip_log)
    try:
        log_path = skip_log.flush()
    except OSError as e:
        logger.warning(f"could not write skip log: {e}")
    else:
        if log_path is not None:
            logger.info(f"skipped {skipped} row(s), details in {log_path}")

    end_time = datetime.now(UTC)
    return RunResult(
        success_files=counts[FileRunStatus.SUCCESS],
        empty_files=counts[FileRunStatus.EMPTY],
        failed_files=counts[FileRunStatus.FAILED],
        total_rows=total_rows,
        total_results=total_results,
        exported_files=exported,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_runs=file_runs,
    )
