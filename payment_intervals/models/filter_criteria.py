from __future__ import annotations

from dataclasses import dataclass

"""Filter criteria for the result view."""

__all__ = [
    "FilterCriteria",
]


@dataclass(frozen=True)
class FilterCriteria:
    """Compound filter, every field optional, combined with AND.

    Empty strings / None / False mean "not set".
    """
    date: str | None = None  # exact match on IntervalResult.date
    terminal_id: str | None = None  # case-sensitive substring
    payment_id: str | None = None  # case-sensitive substring
    time_difference: int | None = None  # seconds, strictly greater than
    only_successful: bool = False  # requires a successful payment set

    @property
    def is_empty(self) -> bool:
        return not (
            self.date
            or self.terminal_id
            or self.payment_id
            or self.time_difference
            or self.only_successful
        )
