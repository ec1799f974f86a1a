from __future__ import annotations

from ..models.run_result import FileRun, RunResult

"""SUMMARY / per-file line rendering."""

__all__ = [
    "render_summary_line",
    "render_file_line",
    "format_seconds",
]


def format_seconds(value: float) -> str:
    """Plain decimal without scientific notation; integers without fraction."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(total_files: int, result: RunResult) -> str:
    """Render the run summary.

    Format:
    SUMMARY files={total}/{total} success={s} empty={e} failed={f} rows={rows}
    results={results} exported={exported} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     success_files=1, empty_files=0, failed_files=0, total_rows=10,
        ...     total_results=4, exported_files=1, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 empty=0 failed=0 rows=10 results=4 exported=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"empty={result.empty_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"results={result.total_results} "
        f"exported={result.exported_files} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )


def render_file_line(run: FileRun) -> str:
    """One line per analyzed file, e.g.

    events.csv status=ok rows=120 events=118 results=40 filtered=12 long=3
    """
    line = (
        f"{run.file_name} status={run.analysis_status} rows={run.rows} "
        f"events={run.events} results={run.results} filtered={run.filtered} "
        f"long={run.long_intervals}"
    )
    if run.export_path is not None:
        line += f" export={run.export_path}"
    return line
