from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Batch run result models.

A batch run analyzes every input file independently; FileRun holds the
per-file numbers and RunResult aggregates them for the SUMMARY line.
"""

__all__ = [
    "FileRunStatus",
    "FileRun",
    "RunResult",
]


class FileRunStatus(Enum):
    """Per-file lifecycle: success (results found) | empty (data-quality state) | failed."""
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class FileRun:
    """Per-file analysis statistics."""
    file_name: str
    status: FileRunStatus
    analysis_status: str  # AnalysisStatus value
    rows: int = 0  # data rows read
    events: int = 0  # rows kept by the parser
    results: int = 0  # interval results before filtering
    filtered: int = 0  # results after filtering
    long_intervals: int = 0
    elapsed_seconds: float = 0.0
    export_path: Path | None = None
    message: str = ""
    dates: tuple[str, ...] = ()  # distinct result dates (valid date filter values)


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of a batch run."""
    success_files: int
    empty_files: int
    failed_files: int
    total_rows: int
    total_results: int
    exported_files: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_runs: list[FileRun] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.empty_files + self.failed_files
