#!/usr/bin/env python3
"""Synthetic payment event log generator.

Generates CSV files in the layout the analyzer reads:
- Header: id, terminal id, event, event body, merchant id, payment id,
  reference id, timestamp, created at
- One row per lifecycle transition; statuses walk 1 -> 2 -> ... -> 8 with
  random delays

A share of rows is deliberately dirty so the parser's recovery paths get
exercised: double-encoded event bodies, bodies without JSON structure,
missing payment ids and missing timestamps.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd

LIFECYCLE = [1, 2, 3, 4, 5, 6, 7, 8]


def _event_body(status: int, style: str) -> str:
    body = json.dumps({"status": status, "source": "gateway"})
    if style == "escaped":
        # exporter that escapes quotes and wraps the object in quotes again
        return '"' + body.replace('"', '\\"') + '"'
    if style == "broken":
        # not JSON anymore, only the regex fallback can read it
        return f'status update "status": {status}, trailing'
    return body


def generate_events(
    payments: int,
    seed: int = 42,
    start: str = "2024-01-01 08:00:00",
    dirty_ratio: float = 0.05,
) -> pd.DataFrame:
    """Build the event log DataFrame.

    Args:
        payments: Number of distinct payment ids
        seed: Random seed for reproducible data
        start: First event time
        dirty_ratio: Share of rows that get a dirty variant

    Returns:
        DataFrame with one row per event, in emission order
    """
    rng = np.random.default_rng(seed)
    base = pd.Timestamp(start, tz="UTC")
    rows: list[dict[str, str]] = []
    row_id = 1

    for p in range(payments):
        payment_id = f"PAY{p + 1:07d}"
        terminal_id = f"T{rng.integers(100, 999)}"
        merchant_id = f"M{rng.integers(10, 99)}"
        t = base + pd.Timedelta(seconds=int(rng.integers(0, 86_400)))
        # 一部の決済は途中ステータスで終わる (to status なし)
        last = int(rng.choice(LIFECYCLE[1:], p=[0.05, 0.05, 0.05, 0.05, 0.05, 0.05, 0.70]))

        for status in LIFECYCLE:
            if status > last:
                break
            t = t + pd.Timedelta(milliseconds=int(rng.gamma(2.0, 1500.0)))
            style = "plain"
            roll = rng.random()
            if roll < dirty_ratio / 2:
                style = "escaped"
            elif roll < dirty_ratio:
                style = "broken"
            created_at = t.isoformat().replace("+00:00", "Z")
            rows.append(
                {
                    "id": str(row_id),
                    "terminal id": terminal_id,
                    "event": f"PAYMENT_STATUS_{status}",
                    "event body": _event_body(status, style),
                    "merchant id": merchant_id,
                    "payment id": "" if rng.random() < dirty_ratio / 4 else payment_id,
                    "reference id": f"REF{row_id:08d}",
                    "timestamp": created_at,
                    "created at": "" if rng.random() < dirty_ratio / 4 else created_at,
                }
            )
            row_id += 1

    return pd.DataFrame(rows)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic payment event log CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/events.csv
  %(prog)s data/large.csv --payments 50000 --seed 7
  %(prog)s data/clean.csv --dirty-ratio 0
        """,
    )
    parser.add_argument("output", type=Path, help="Output CSV path")
    parser.add_argument("--payments", type=int, default=1000, help="Number of payments (default: 1000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dirty-ratio", type=float, default=0.05, help="Share of dirty rows (default: 0.05)")
    parser.add_argument(
        "--successful",
        type=Path,
        help="Also write a successful payments CSV (paymentId column) for payments that reached status 8",
    )
    args = parser.parse_args()

    if args.payments <= 0:
        print("Error: --payments must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.dirty_ratio <= 1:
        print("Error: --dirty-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    df = generate_events(args.payments, seed=args.seed, dirty_ratio=args.dirty_ratio)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.output, index=False)
    print(f"Created event log: {args.output}")
    print(f"  Payments: {args.payments:,}")
    print(f"  Rows: {len(df):,}")

    if args.successful is not None:
        done = df.loc[df["event"] == "PAYMENT_STATUS_8", "payment id"]
        ids = sorted({p for p in done.tolist() if p})
        args.successful.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame({"paymentId": ids}).to_csv(args.successful, index=False)
        print(f"Created successful payments file: {args.successful} ({len(ids):,} ids)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
