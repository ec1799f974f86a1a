from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.event import NormalizedEvent

"""Payment aggregation.

Events are grouped by payment id keeping input order, both inside a group
and across groups (first appearance of the id). Status matching picks the
FIRST event in row order, not the earliest timestamp: when a status repeats,
the earlier row wins.
"""

__all__ = [
    "PaymentGroups",
    "group_by_payment",
    "select_first",
    "select_pair",
]

PaymentGroups = dict[str, list[NormalizedEvent]]


def group_by_payment(events: Iterable[NormalizedEvent]) -> PaymentGroups:
    groups: PaymentGroups = {}
    for event in events:
        groups.setdefault(event.payment_id, []).append(event)
    return groups


def select_first(events: Sequence[NormalizedEvent], status: int) -> NormalizedEvent | None:
    for event in events:
        if event.status == status:
            return event
    return None


def select_pair(
    events: Sequence[NormalizedEvent], from_status: int, to_status: int
) -> tuple[NormalizedEvent, NormalizedEvent] | None:
    """First `from_status` event and first `to_status` event, or None if either is missing."""
    from_event = select_first(events, from_status)
    to_event = select_first(events, to_status)
    if from_event is None or to_event is None:
        return None
    return from_event, to_event
