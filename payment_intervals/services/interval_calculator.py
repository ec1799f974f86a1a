from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from ..models.event import NormalizedEvent
from ..models.interval_result import IntervalResult
from .aggregator import select_pair
from .timestamps import diff_ms, parse_timestamp, to_instant

"""Interval calculation.

For every payment group: take the first from/to status events, keep the
payment only when the "to" event is strictly later, and report the gap in
whole milliseconds as text. Terminal, merchant and date come from the "from"
event. Payments with a missing status, an unparseable timestamp, or a "to"
event at or before the "from" event produce no result.
"""

__all__ = [
    "compute_intervals",
]

logger = logging.getLogger(__name__)


def compute_intervals(
    groups: Mapping[str, Sequence[NormalizedEvent]],
    from_status: int,
    to_status: int,
) -> list[IntervalResult]:
    """One IntervalResult per qualifying payment, in group iteration order."""
    results: list[IntervalResult] = []

    for payment_id, events in groups.items():
        pair = select_pair(events, from_status, to_status)
        if pair is None:
            logger.debug(
                f"payment {payment_id} missing status(es): "
                f"{from_status}={any(e.status == from_status for e in events)}, "
                f"{to_status}={any(e.status == to_status for e in events)}"
            )
            continue
        from_event, to_event = pair

        from_ts = parse_timestamp(from_event.timestamp)
        to_ts = parse_timestamp(to_event.timestamp)
        if from_ts is None or to_ts is None:
            logger.debug(f"payment {payment_id}: unparseable timestamp, excluded")
            continue

        start = to_instant(from_ts)
        end = to_instant(to_ts)
        if not end > start:
            logger.debug(
                f"payment {payment_id}: status {to_status} is not after status {from_status}"
            )
            continue

        results.append(
            IntervalResult(
                payment_id=payment_id,
                from_status_time=from_event.timestamp,
                to_status_time=to_event.timestamp,
                time_difference_ms=str(diff_ms(start, end)),
                terminal_id=from_event.terminal_id,
                merchant_id=from_event.merchant_id,
                date=from_event.date,
                from_status=from_status,
                to_status=to_status,
            )
        )

    logger.debug(f"{len(results)} interval(s) from {len(groups)} payment group(s)")
    return results
