from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.filter_criteria import FilterCriteria
from ..models.interval_result import IntervalResult

"""Result filtering.

apply_filters() never touches its input; it returns a new list containing a
subset of the given results in their original order. Each criterion is
optional and they combine with AND, so adding a criterion can only shrink
the output.
"""

__all__ = [
    "apply_filters",
    "available_dates",
]


def apply_filters(
    results: Sequence[IntervalResult],
    criteria: FilterCriteria | None = None,
    successful_ids: Iterable[str] | None = None,
) -> list[IntervalResult]:
    """Filter results by date, terminal/payment id substring, minimum seconds
    and membership in the successful payment set.

    `only_successful` without a successful payment set is a no-op.
    """
    filtered = list(results)
    if criteria is None or criteria.is_empty:
        return filtered

    if criteria.date:
        filtered = [r for r in filtered if r.date == criteria.date]

    if criteria.terminal_id:
        filtered = [r for r in filtered if r.terminal_id and criteria.terminal_id in r.terminal_id]

    if criteria.payment_id:
        filtered = [r for r in filtered if r.payment_id and criteria.payment_id in r.payment_id]

    if criteria.time_difference:
        threshold = int(criteria.time_difference) * 1000
        filtered = [r for r in filtered if r.difference_ms > threshold]

    if criteria.only_successful and successful_ids is not None:
        allowed = successful_ids if isinstance(successful_ids, (set, frozenset)) else set(successful_ids)
        filtered = [r for r in filtered if r.payment_id in allowed]

    return filtered


def available_dates(results: Iterable[IntervalResult]) -> list[str]:
    """Sorted distinct non-empty dates, i.e. the valid values for a date filter."""
    return sorted({r.date for r in results if r.date})
