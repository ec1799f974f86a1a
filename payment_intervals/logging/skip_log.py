from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from payment_intervals.models.skip_record import SkipRecord

"""Skip log buffering.

- JSON Lines, fixed schema (see SkipRecord)
- One `logs/skipped-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Records are buffered in memory and written once per flush
"""

__all__ = [
    "SkipRecord",
    "SkipLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class SkipLogBuffer:
    """In-memory buffer for skip records. Flush writes JSON Lines.

    - ファイルパスは初回 flush で決定
    - スレッド安全性不要 (シリアル実行)
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[SkipRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"skipped-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[SkipRecord]:
        return list(self._records)

    def append(self, record: SkipRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file and clear the buffer.

        Returns the file path, or None when there was nothing to write (no
        empty log files are created).
        """
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
