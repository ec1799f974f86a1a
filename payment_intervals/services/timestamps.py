from __future__ import annotations

import warnings

import pandas as pd

from ..models.event import INVALID_DATE

"""Timestamp helpers shared by the record parser and the interval calculator.

Event logs mix formats (ISO 8601 with or without offset, "2024-01-01
10:00:00", "01/02/2024 10:00" ...), so parsing goes through
pandas.to_datetime on each value. Instants are compared in UTC at millisecond
resolution: offset-aware values are converted, naive values are taken as UTC
wall clock.
"""

__all__ = [
    "parse_timestamp",
    "to_instant",
    "format_date",
    "diff_ms",
]


def parse_timestamp(value: str | None) -> pd.Timestamp | None:
    """Parse one timestamp string; None when it is empty or unparseable."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        with warnings.catch_warnings():
            # dayfirst 推定の UserWarning は抑止 (値ごとに出るため)
            warnings.simplefilter("ignore", UserWarning)
            ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def to_instant(ts: pd.Timestamp) -> pd.Timestamp:
    """UTC-naive, millisecond-floored instant used for ordering and diffs."""
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.floor("ms")


def format_date(value: str | None, fmt: str = "%d/%m/%Y") -> str:
    """Render the calendar date of a timestamp string.

    The date is taken in the timestamp's own offset. Unparseable input gives
    INVALID_DATE instead of raising.
    """
    ts = parse_timestamp(value)
    if ts is None:
        return INVALID_DATE
    try:
        return ts.strftime(fmt)
    except ValueError:
        return INVALID_DATE


def diff_ms(start: pd.Timestamp, end: pd.Timestamp) -> int:
    """Whole milliseconds from start to end (instants from to_instant)."""
    return int((end - start) // pd.Timedelta(milliseconds=1))
