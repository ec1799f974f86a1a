from __future__ import annotations

import re
from pathlib import Path

from payment_intervals.cli import main as cli_main

"""SUMMARY 行フォーマット契約テスト."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+empty=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+results=([0-9]+)\s+exported=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)

FILE_LINE_PATTERN = re.compile(
    r"^INFO (\S+) status=([a-z_]+) rows=([0-9]+) events=([0-9]+) results=([0-9]+) "
    r"filtered=([0-9]+) long=([0-9]+)( export=\S+)?$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY files=2/2 success=1 empty=1 failed=0 rows=9 results=2 exported=1 elapsed_sec=0.084"
    m = SUMMARY_PATTERN.match(line)
    assert m, "SUMMARY line should match contract regex"


def test_summary_pattern_rejects_mismatched_totals():
    line = "SUMMARY files=2/3 success=1 empty=1 failed=0 rows=9 results=2 exported=1 elapsed_sec=1"
    assert SUMMARY_PATTERN.match(line) is None


def test_cli_output_lines_match_contract(temp_workdir: Path, write_config: Path, write_events, scenario_rows, capsys):
    write_events("events.csv", scenario_rows)

    cli_main([])

    lines = capsys.readouterr().out.splitlines()
    summary = [line for line in lines if line.startswith("SUMMARY")]
    assert len(summary) == 1
    m = SUMMARY_PATTERN.match(summary[0])
    assert m
    assert m.group(1) == "1"
    assert m.group(6) == "8"  # rows
    assert m.group(7) == "2"  # results
    assert m.group(8) == "1"  # exported

    file_lines = [line for line in lines if FILE_LINE_PATTERN.match(line)]
    assert len(file_lines) == 1
    fm = FILE_LINE_PATTERN.match(file_lines[0])
    assert fm.group(1) == "events.csv"
    assert fm.group(2) == "ok"
    assert fm.group(8) is not None
