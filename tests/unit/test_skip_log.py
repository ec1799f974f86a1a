from __future__ import annotations

import json
import re
from pathlib import Path

from payment_intervals.logging.skip_log import SkipLogBuffer
from payment_intervals.models.skip_record import MISSING_TIMESTAMP, NO_STATUS, SkipRecord


def test_skip_record_create_and_json_line():
    rec = SkipRecord.create("events.csv", 3, NO_STATUS, "body=garbage")
    assert rec.timestamp.endswith("Z")
    data = json.loads(rec.to_json_line())
    assert set(data) == {"timestamp", "file", "row", "reason", "detail"}
    assert data["file"] == "events.csv"
    assert data["row"] == 3
    assert data["reason"] == "NO_STATUS"


def test_flush_writes_json_lines(tmp_path: Path):
    buf = SkipLogBuffer(logs_dir=tmp_path / "logs")
    buf.append(SkipRecord.create("a.csv", 1, NO_STATUS))
    buf.append(SkipRecord.create("a.csv", 4, MISSING_TIMESTAMP, "created at="))
    assert len(buf) == 2

    path = buf.flush()

    assert path is not None
    assert re.fullmatch(r"skipped-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [1, 4]
    assert len(buf) == 0


def test_flush_when_empty_creates_no_file(tmp_path: Path):
    logs = tmp_path / "logs"
    buf = SkipLogBuffer(logs_dir=logs)
    assert buf.flush() is None
    assert not logs.exists()


def test_second_flush_appends_to_same_file(tmp_path: Path):
    buf = SkipLogBuffer(logs_dir=tmp_path)
    buf.append(SkipRecord.create("a.csv", 1, NO_STATUS))
    first = buf.flush()
    buf.append(SkipRecord.create("b.csv", 2, NO_STATUS))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_records_returns_copy(tmp_path: Path):
    buf = SkipLogBuffer(logs_dir=tmp_path)
    buf.append(SkipRecord.create("a.csv", 1, NO_STATUS))
    buf.records.clear()
    assert len(buf) == 1
