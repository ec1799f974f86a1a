from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""SkipRecord model for row-level diagnostics.

A row that cannot be turned into an event (no payment id, no timestamp, no
resolvable status) is dropped without failing the batch. Each drop is kept as
a SkipRecord so operators can see afterwards which rows of which file were
ignored and why.
"""

__all__ = [
    "SkipRecord",
    "MISSING_PAYMENT_ID",
    "MISSING_TIMESTAMP",
    "NO_STATUS",
]

MISSING_PAYMENT_ID = "MISSING_PAYMENT_ID"
MISSING_TIMESTAMP = "MISSING_TIMESTAMP"
NO_STATUS = "NO_STATUS"


@dataclass(frozen=True)
class SkipRecord:
    """Structured record for one dropped input row.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input file name ("<memory>" when analyzing raw text)
        row: 1-based data row number (header excluded). -1 when unknown
        reason: Skip classification in UPPER_SNAKE_CASE
        detail: Short free-text detail (truncated event body etc.)
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    reason: str  # UPPER_SNAKE
    detail: str

    @staticmethod
    def create(file: str, row: int, reason: str, detail: str = "") -> SkipRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return SkipRecord(
            timestamp=ts,
            file=file,
            row=row,
            reason=reason,
            detail=detail,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON Lines entry (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
