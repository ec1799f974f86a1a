from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..models.analysis import AnalysisStatus, ExportResult
from ..models.interval_result import IntervalResult

"""CSV export of interval results.

Format:
    Payment ID,From Status Time,To Status Time,Time Difference (ms),Terminal ID,Merchant ID,Date
    one line per result, "\\n" line endings

A field is quoted (internal quotes doubled) only when it contains a comma, a
double quote or a newline. The stdlib csv writer also quotes on "\\r" and
other line terminator characters, so quoting is done by hand here.

Known gap: a value holding a bare "\\r" is written unquoted, and CSV readers
treat that "\\r" as a line break, so such a value does not round-trip.
"""

__all__ = [
    "EXPORT_HEADERS",
    "EXPORT_FILE_PREFIX",
    "format_field",
    "render_csv",
    "export_results",
    "write_export",
]

EXPORT_HEADERS = [
    "Payment ID",
    "From Status Time",
    "To Status Time",
    "Time Difference (ms)",
    "Terminal ID",
    "Merchant ID",
    "Date",
]

EXPORT_FILE_PREFIX = "payment_intervals_"
FILE_TIMESTAMP_FMT = "%Y%m%d_%H%M%S"


def format_field(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _row(result: IntervalResult) -> list[Any]:
    return [
        result.payment_id,
        result.from_status_time,
        result.to_status_time,
        result.time_difference_ms,
        result.terminal_id,
        result.merchant_id,
        result.date,
    ]


def render_csv(results: Sequence[IntervalResult]) -> str:
    """Render header plus one line per result."""
    lines = [",".join(EXPORT_HEADERS)]
    for result in results:
        lines.append(",".join(format_field(v) for v in _row(result)))
    return "\n".join(lines) + "\n"


def export_results(results: Sequence[IntervalResult]) -> ExportResult:
    """Export the (filtered) results; an empty sequence is reported, not raised."""
    if not results:
        return ExportResult(status=AnalysisStatus.EMPTY_EXPORT, message="No data to export")
    return ExportResult(
        status=AnalysisStatus.OK,
        content=render_csv(results),
        row_count=len(results),
    )


def write_export(
    content: str, directory: Path, now: datetime | None = None, label: str | None = None
) -> Path:
    """Write export content to `payment_intervals_[label_]YYYYMMDD_HHMMSS.csv`.

    `label` (the input file stem in batch runs) keeps exports of several
    inputs written in the same second apart.
    """
    directory.mkdir(parents=True, exist_ok=True)
    stamp = (now or datetime.now(UTC)).strftime(FILE_TIMESTAMP_FMT)
    name = f"{EXPORT_FILE_PREFIX}{label}_{stamp}.csv" if label else f"{EXPORT_FILE_PREFIX}{stamp}.csv"
    path = directory / name
    # newline="" で "\n" をそのまま書き出す (Windows でも CRLF 変換しない)
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path
