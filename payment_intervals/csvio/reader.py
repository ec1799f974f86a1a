from __future__ import annotations

import csv
import io
import logging
import warnings
from typing import Any

import pandas as pd

from payment_intervals.models.event import RawRow

"""CSV event table reader.

- The first line is the header; names are trimmed and lower-cased so that
  "Payment ID " and "payment id" resolve to the same column.
- Every cell is read as text. Empty cells stay "" (no NaN conversion).
- Blank lines are skipped. Fields beyond the header width are ignored row by
  row (trailing commas, stray cells) instead of shifting every column or
  failing the whole table. Short rows are padded with "".
"""

__all__ = [
    "MalformedBatchError",
    "normalize_header",
    "read_event_table",
    "read_successful_ids",
    "inspect_table",
    "SUCCESSFUL_ID_COLUMN",
]

logger = logging.getLogger(__name__)

SUCCESSFUL_ID_COLUMN = "paymentId"


class MalformedBatchError(Exception):
    """Raised when the input cannot be read as a table or has no data rows."""


def normalize_header(name: Any) -> str:
    return str(name).strip().lower()


def _read_frame(text: str) -> tuple[pd.DataFrame, bool]:
    """Parse CSV text into an all-string DataFrame.

    Returns the frame and whether some row had more fields than the header
    (those extra fields are cut off).
    """
    if text is None or not text.strip():
        raise MalformedBatchError("input is empty")

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            # index_col=False: 1 列多い先頭行を index 列と推定させない
            df = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine="python",
                index_col=False,
            )
    except pd.errors.EmptyDataError as e:
        raise MalformedBatchError(f"no columns to parse: {e}") from e
    except (pd.errors.ParserError, csv.Error) as e:
        raise MalformedBatchError(f"not parseable as CSV: {e}") from e

    truncated = False
    for w in caught:
        if issubclass(w.category, pd.errors.ParserWarning):
            truncated = True
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)

    # 欠落セル (行末の列不足) は NaN になるため空文字へ
    df = df.fillna("")
    return df, truncated


def read_event_table(text: str) -> list[RawRow]:
    """Read the primary event log into RawRows keyed by normalized header.

    Raises:
        MalformedBatchError: empty input, untokenizable text, or zero data rows
    """
    df, truncated = _read_frame(text)
    columns = [normalize_header(c) for c in df.columns]
    if truncated:
        logger.warning("ignored fields beyond the header width in some row(s)")

    rows: list[RawRow] = []
    for values in df.itertuples(index=False, name=None):
        rows.append({col: str(v) for col, v in zip(columns, values, strict=False)})

    if not rows:
        raise MalformedBatchError("CSV file is empty or couldn't be parsed correctly")
    logger.debug(f"read {len(rows)} rows, columns={columns}")
    return rows


def read_successful_ids(text: str) -> frozenset[str]:
    """Read the successful payments file (`paymentId` column, exact case).

    Blank ids are ignored; a file without the column yields an empty set.
    """
    df, _ = _read_frame(text)
    if SUCCESSFUL_ID_COLUMN not in df.columns:
        logger.debug(f"no {SUCCESSFUL_ID_COLUMN!r} column in {list(df.columns)}")
        return frozenset()
    return frozenset(v for v in df[SUCCESSFUL_ID_COLUMN].tolist() if v)


def inspect_table(text: str, limit: int = 3) -> tuple[list[str], list[RawRow]]:
    """Return the normalized header and the first `limit` rows."""
    df, _ = _read_frame(text)
    columns = [normalize_header(c) for c in df.columns]
    sample: list[RawRow] = []
    for values in df.head(limit).itertuples(index=False, name=None):
        sample.append({col: str(v) for col, v in zip(columns, values, strict=False)})
    return columns, sample
