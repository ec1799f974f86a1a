from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Iterable
from typing import Any

from ..logging.skip_log import SkipLogBuffer
from ..models.event import NormalizedEvent, RawRow
from ..models.skip_record import MISSING_PAYMENT_ID, MISSING_TIMESTAMP, NO_STATUS, SkipRecord
from .timestamps import format_date

"""Record parser: RawRow -> NormalizedEvent.

Columns used (after header normalization):
    payment id, terminal id, merchant id, event, event body,
    created at (falls back to timestamp when absent or empty)

A row is dropped, never fatal, when the payment id or timestamp is empty or
no status can be read from the event body. Drops are reported to the
optional SkipLogBuffer and logged at DEBUG.

Event bodies come from several log exporters and are often double encoded:
    {"status": 8}
    {\\"status\\": 8}
    "{\\"status\\": 8}"
normalize_event_body() undoes those artifacts before strict JSON decoding;
when decoding still fails a regex scan for `"status": <digits>` is the last
resort.
"""

__all__ = [
    "COL_PAYMENT_ID",
    "COL_TERMINAL_ID",
    "COL_MERCHANT_ID",
    "COL_EVENT",
    "COL_EVENT_BODY",
    "COL_CREATED_AT",
    "COL_TIMESTAMP",
    "normalize_event_body",
    "coerce_status",
    "extract_status",
    "parse_records",
]

logger = logging.getLogger(__name__)

COL_PAYMENT_ID = "payment id"
COL_TERMINAL_ID = "terminal id"
COL_MERCHANT_ID = "merchant id"
COL_EVENT = "event"
COL_EVENT_BODY = "event body"
COL_CREATED_AT = "created at"
COL_TIMESTAMP = "timestamp"

STATUS_PATTERN = re.compile(r'"status"\s*:\s*(\d+)')
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

DETAIL_MAX = 120

BodyNormalizer = Callable[[str], str]


def normalize_event_body(body: str) -> str:
    """Undo escaping artifacts of double-encoded event bodies.

    Unescapes \\" and drops a quote directly before `{` or after `}`. This is
    pattern stripping, not JSON repair.
    """
    return body.replace('\\"', '"').replace('"{', "{").replace('}"', "}")


def coerce_status(value: Any) -> int | None:
    """Integer value of a decoded `status` field.

    Integers pass through, finite floats are truncated, strings resolve by
    their leading integer ("8", " 8 ", "8ms"). Booleans, null and anything
    else do not resolve.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        m = _INT_PREFIX.match(value)
        return int(m.group(1)) if m else None
    return None


def _scan_status(*texts: str) -> int | None:
    for text in texts:
        m = STATUS_PATTERN.search(text)
        if m:
            return int(m.group(1))
    return None


def extract_status(body: str, normalizer: BodyNormalizer = normalize_event_body) -> int | None:
    """Read the lifecycle status code from an event body.

    1. normalize escaping (normalizer)
    2. strict JSON decode; an object with a `status` key is coerced to int
    3. only when decoding fails: regex scan of the cleaned, then raw text
    """
    if not body:
        return None
    cleaned = normalizer(body)
    try:
        decoded = json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError):
        status = _scan_status(cleaned, body)
        if status is not None:
            logger.debug(f"status {status} extracted via regex from event body")
        return status

    if isinstance(decoded, dict) and "status" in decoded:
        status = coerce_status(decoded["status"])
        if status is None:
            # JSON は正しいが status が数値でない場合も regex で救済
            status = _scan_status(cleaned)
        return status
    return None


def _cell(row: RawRow, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def _skip(
    skip_log: SkipLogBuffer | None, source: str, row_number: int, reason: str, detail: str
) -> None:
    logger.debug(f"skipping row {row_number}: {reason} {detail}")
    if skip_log is not None:
        skip_log.append(SkipRecord.create(source, row_number, reason, detail[:DETAIL_MAX]))


def parse_records(
    raw_rows: Iterable[RawRow],
    *,
    skip_log: SkipLogBuffer | None = None,
    source: str = "<memory>",
    date_format: str = "%d/%m/%Y",
    normalizer: BodyNormalizer = normalize_event_body,
) -> list[NormalizedEvent]:
    """Turn raw rows into events, dropping unusable rows individually.

    Output order follows input order; len(output) <= len(input).
    """
    events: list[NormalizedEvent] = []
    for row_number, row in enumerate(raw_rows, start=1):
        payment_id = _cell(row, COL_PAYMENT_ID)
        timestamp = _cell(row, COL_CREATED_AT) or _cell(row, COL_TIMESTAMP)

        if not payment_id:
            _skip(skip_log, source, row_number, MISSING_PAYMENT_ID, "")
            continue
        if not timestamp:
            _skip(skip_log, source, row_number, MISSING_TIMESTAMP, payment_id)
            continue

        body = row.get(COL_EVENT_BODY) or ""
        status = extract_status(body, normalizer)
        if status is None:
            _skip(skip_log, source, row_number, NO_STATUS, body)
            continue

        events.append(
            NormalizedEvent(
                payment_id=payment_id,
                timestamp=timestamp,
                status=status,
                terminal_id=_cell(row, COL_TERMINAL_ID),
                merchant_id=_cell(row, COL_MERCHANT_ID),
                date=format_date(timestamp, date_format),
                event=_cell(row, COL_EVENT),
                row_number=row_number,
            )
        )

    logger.debug(f"parsed {len(events)} events")
    return events
