from __future__ import annotations

from dataclasses import dataclass

"""IntervalResult model.

One result per payment that has both target statuses with the "to" event
strictly after the "from" event.
"""

__all__ = [
    "IntervalResult",
    "LONG_INTERVAL_MS",
]

# Results above this are flagged as slow in reports (10 seconds)
LONG_INTERVAL_MS = 10_000


@dataclass(frozen=True)
class IntervalResult:
    """Elapsed time between two lifecycle statuses of one payment.

    `time_difference_ms` is kept as base-10 text; compare through
    `difference_ms` rather than on the string.
    """
    payment_id: str
    from_status_time: str
    to_status_time: str
    time_difference_ms: str
    terminal_id: str
    merchant_id: str
    date: str
    from_status: int
    to_status: int

    @property
    def difference_ms(self) -> int:
        return int(self.time_difference_ms)

    @property
    def is_long(self) -> bool:
        return self.difference_ms > LONG_INTERVAL_MS
