# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from payment_intervals.logging.init import reset_logging

EVENT_COLUMNS = [
    "id",
    "terminal id",
    "event",
    "event body",
    "merchant id",
    "payment id",
    "reference id",
    "timestamp",
    "created at",
]


def event_row(
    payment_id: str,
    status: int | None,
    created_at: str,
    *,
    terminal_id: str = "T1",
    merchant_id: str = "M1",
    body: str | None = None,
    timestamp: str = "",
) -> dict[str, str]:
    """One event log row; `body` overrides the generated event body."""
    if body is None:
        body = json.dumps({"status": status}) if status is not None else ""
    return {
        "id": "",
        "terminal id": terminal_id,
        "event": f"STATUS_{status}" if status is not None else "",
        "event body": body,
        "merchant id": merchant_id,
        "payment id": payment_id,
        "reference id": "",
        "timestamp": timestamp,
        "created at": created_at,
    }


def events_csv(rows: list[dict[str, str]], columns: list[str] | None = None) -> str:
    df = pd.DataFrame(rows, columns=columns or EVENT_COLUMNS)
    return df.to_csv(index=False)


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handler は生成時の sys.stdout を掴むため、テストごとに作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PAYMENT_FROM_STATUS", raising=False)
        monkeypatch.delenv("PAYMENT_TO_STATUS", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
export_directory: ./exports
from_status: 2
to_status: 8
date_format: "%d/%m/%Y"
filters:
  time_difference: null
  only_successful: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "analyzer.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def scenario_rows() -> list[dict[str, str]]:
    """P1: 2 -> 8 in 7s, P2: only status 2, P3: 8 before 2, P4: 2 -> 8 in 12s."""
    return [
        event_row("P1", 2, "2024-01-01T10:00:00Z", terminal_id="T100"),
        event_row("P2", 2, "2024-01-01T11:00:00Z", terminal_id="T200"),
        event_row("P1", 8, "2024-01-01T10:00:07Z", terminal_id="T100"),
        event_row("P3", 8, "2024-01-02T09:00:00Z", terminal_id="T300"),
        event_row("P3", 2, "2024-01-02T09:00:05Z", terminal_id="T300"),
        event_row("P4", 2, "2024-01-02T12:00:00Z", terminal_id="T101"),
        event_row("P4", 5, "2024-01-02T12:00:03Z", terminal_id="T101"),
        event_row("P4", 8, "2024-01-02T12:00:12Z", terminal_id="T101"),
    ]


@pytest.fixture()
def write_events(temp_workdir: Path) -> Callable[[str, list[dict[str, str]]], Path]:
    def _write(name: str, rows: list[dict[str, str]]) -> Path:
        path = temp_workdir / "data" / name
        path.write_text(events_csv(rows), encoding="utf-8")
        return path

    return _write
