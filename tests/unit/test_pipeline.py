from __future__ import annotations

from pathlib import Path

from conftest import event_row, events_csv

from payment_intervals.csvio.source import ReadError
from payment_intervals.logging.skip_log import SkipLogBuffer
from payment_intervals.models.analysis import AnalysisContext, AnalysisStatus
from payment_intervals.models.filter_criteria import FilterCriteria
from payment_intervals.services.pipeline import (
    analyze_source,
    analyze_text,
    load_successful_ids,
    recompute,
    refilter,
)


def test_analyze_text_scenarios(scenario_rows):
    outcome = analyze_text(events_csv(scenario_rows))
    assert outcome.status is AnalysisStatus.OK
    assert outcome.ok
    assert [(r.payment_id, r.time_difference_ms) for r in outcome.results] == [
        ("P1", "7000"),
        ("P4", "12000"),
    ]
    assert outcome.filtered_results == outcome.results
    assert outcome.row_count == 8
    assert outcome.skipped_rows == 0
    assert outcome.payment_count == 4
    assert outcome.long_intervals == 1


def test_scenario_c_escaped_body_equals_plain_body():
    plain = [
        event_row("P1", 2, "2024-01-01T10:00:00Z"),
        event_row("P1", None, "2024-01-01T10:00:07Z", body='{"status": 8}'),
    ]
    escaped = [
        event_row("P1", 2, "2024-01-01T10:00:00Z"),
        event_row("P1", None, "2024-01-01T10:00:07Z", body='"{\\"status\\": 8}"'),
    ]
    a = analyze_text(events_csv(plain))
    b = analyze_text(events_csv(escaped))
    assert [e.status for e in a.events] == [e.status for e in b.events] == [2, 8]
    assert a.results == b.results


def test_trailing_commas_keep_scenario_a_result():
    text = (
        "payment id,event body,created at\n"
        'P1,"{""status"": 2}",2024-01-01T10:00:00Z,\n'
        'P1,"{""status"": 8}",2024-01-01T10:00:07Z,\n'
    )
    outcome = analyze_text(text)
    assert outcome.status is AnalysisStatus.OK
    assert [(r.payment_id, r.time_difference_ms) for r in outcome.results] == [("P1", "7000")]


def test_stray_cell_in_first_row_keeps_both_rows():
    text = (
        "payment id,event body,created at\n"
        'P1,"{""status"": 2}",2024-01-01T10:00:00Z,extra\n'
        'P1,"{""status"": 8}",2024-01-01T10:00:07Z\n'
    )
    outcome = analyze_text(text)
    assert len(outcome.events) == 2
    assert outcome.results[0].time_difference_ms == "7000"


def test_malformed_batch():
    outcome = analyze_text("")
    assert outcome.status is AnalysisStatus.MALFORMED_BATCH
    assert outcome.results == ()
    assert outcome.message


def test_no_usable_rows(tmp_path: Path):
    rows = [
        event_row("", 2, "2024-01-01T10:00:00Z"),
        event_row("P1", None, "2024-01-01T10:00:00Z", body="nothing"),
    ]
    skip_log = SkipLogBuffer(logs_dir=tmp_path)
    outcome = analyze_text(events_csv(rows), skip_log=skip_log)
    assert outcome.status is AnalysisStatus.NO_USABLE_ROWS
    assert outcome.row_count == 2
    assert outcome.skipped_rows == 2
    assert len(skip_log) == 2


def test_no_matching_pairs_is_not_an_error():
    rows = [event_row("P2", 2, "2024-01-01T10:00:00Z")]
    outcome = analyze_text(events_csv(rows))
    assert outcome.status is AnalysisStatus.NO_MATCHING_PAIRS
    assert "status 2 and status 8" in outcome.message
    assert len(outcome.events) == 1


def test_context_criteria_applied(scenario_rows):
    ctx = AnalysisContext(criteria=FilterCriteria(time_difference=10))
    outcome = analyze_text(events_csv(scenario_rows), ctx)
    assert len(outcome.results) == 2
    assert [r.payment_id for r in outcome.filtered_results] == ["P4"]


def test_recompute_with_new_statuses_reuses_events(scenario_rows):
    first = analyze_text(events_csv(scenario_rows))
    second = recompute(first, AnalysisContext().with_statuses(5, 8))
    assert second.events is first.events
    assert [(r.payment_id, r.time_difference_ms) for r in second.results] == [("P4", "9000")]
    assert first.results[0].payment_id == "P1"  # original outcome untouched


def test_recompute_without_events_returns_outcome_unchanged():
    broken = analyze_text("")
    assert recompute(broken, AnalysisContext()) is broken


def test_refilter_keeps_results(scenario_rows):
    outcome = analyze_text(events_csv(scenario_rows))
    ctx = AnalysisContext(criteria=FilterCriteria(only_successful=True)).with_successful_ids(frozenset({"P4"}))
    narrowed = refilter(outcome, ctx)
    assert narrowed.results == outcome.results
    assert [r.payment_id for r in narrowed.filtered_results] == ["P4"]
    widened = refilter(narrowed, AnalysisContext())
    assert widened.filtered_results == outcome.results


def test_analyze_source_with_injected_acquirer(scenario_rows):
    seen: list[Path] = []

    def fake_acquire(source: Path) -> str:
        seen.append(source)
        return events_csv(scenario_rows)

    outcome = analyze_source(Path("in-memory.csv"), acquire=fake_acquire)
    assert seen == [Path("in-memory.csv")]
    assert outcome.ok


def test_analyze_source_read_error():
    def failing(source: Path) -> str:
        raise ReadError("disk gone")

    outcome = analyze_source(Path("x.csv"), acquire=failing)
    assert outcome.status is AnalysisStatus.READ_ERROR
    assert "disk gone" in outcome.message


def test_load_successful_ids_states():
    ok = load_successful_ids(Path("s.csv"), acquire=lambda _: "paymentId\nP1\nP2\n")
    assert ok.status is AnalysisStatus.OK
    assert ok.ids == frozenset({"P1", "P2"})

    empty = load_successful_ids(Path("s.csv"), acquire=lambda _: "id\n1\n")
    assert empty.status is AnalysisStatus.NO_USABLE_ROWS
    assert empty.ids is None

    malformed = load_successful_ids(Path("s.csv"), acquire=lambda _: "")
    assert malformed.status is AnalysisStatus.MALFORMED_BATCH

    def failing(source: Path) -> str:
        raise ReadError("nope")

    assert load_successful_ids(Path("s.csv"), acquire=failing).status is AnalysisStatus.READ_ERROR
