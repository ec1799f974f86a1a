from __future__ import annotations

from dataclasses import dataclass

"""Event models for the payment interval analyzer.

RawRow is one line of the uploaded event log after header normalization;
NormalizedEvent is what the record parser keeps from it.
"""

__all__ = [
    "RawRow",
    "NormalizedEvent",
    "INVALID_DATE",
]

# Normalized (trimmed, lower-cased) column name -> cell text
RawRow = dict[str, str]

# Display value used when a timestamp cannot be parsed
INVALID_DATE = "Invalid date"


@dataclass(frozen=True)
class NormalizedEvent:
    """One lifecycle transition of a payment.

    `payment_id` and `timestamp` are never empty and `status` is always a
    resolved integer. `timestamp` keeps the original text; `date` is its
    DD/MM/YYYY rendering (or INVALID_DATE) and is only used as an opaque key.
    """
    payment_id: str
    timestamp: str
    status: int
    terminal_id: str = ""
    merchant_id: str = ""
    date: str = ""
    event: str = ""  # event name column, diagnostics only
    row_number: int = -1  # 1-based data row in the source table
