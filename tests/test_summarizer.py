"""Tests for the run summarizer."""

from allure_dashboard.models.test_result import TestResultRecord
from allure_dashboard.services.summarizer import summarize_records


def _record(status: str, start=1000, stop=2000, name="t") -> TestResultRecord:
    return TestResultRecord(name=name, status=status, start=start, stop=stop, run_id="run-A")


def test_empty_run_yields_zero_summary():
    summary = summarize_records([])

    assert summary.statistic.model_dump() == {
        "total": 0, "passed": 0, "failed": 0, "broken": 0, "skipped": 0
    }
    assert summary.time.start is None
    assert summary.time.stop is None
    assert summary.total_files == 0


def test_counts_by_status():
    records = (
        [_record("passed")] * 7
        + [_record("failed")] * 2
        + [_record("broken")]
    )

    summary = summarize_records(records, run_id="run-A")

    assert summary.run_id == "run-A"
    assert summary.statistic.model_dump() == {
        "total": 10, "passed": 7, "failed": 2, "broken": 1, "skipped": 0
    }


def test_known_statuses_sum_to_total():
    records = [_record(s) for s in ["passed", "failed", "broken", "skipped", "passed"]]

    stats = summarize_records(records).statistic

    assert stats.total == len(records)
    assert stats.passed + stats.failed + stats.broken + stats.skipped == stats.total


def test_unknown_and_miscased_statuses_count_only_in_total():
    records = [_record("passed"), _record("PASSED"), _record("unknown")]

    stats = summarize_records(records).statistic

    assert stats.total == 3
    assert stats.passed == 1
    assert stats.passed + stats.failed + stats.broken + stats.skipped == 1


def test_time_bounds_are_min_start_and_max_stop():
    records = [
        _record("passed", start=3000, stop=4000),
        _record("passed", start=1000, stop=1500),
        _record("failed", start=2000, stop=9000),
    ]

    summary = summarize_records(records)

    assert summary.time.start == 1000
    assert summary.time.stop == 9000


def test_missing_timestamps_are_excluded_by_default():
    records = [
        _record("passed", start=None, stop=None),
        _record("passed", start=5000, stop=6000),
    ]

    summary = summarize_records(records)

    assert summary.statistic.total == 2
    assert summary.time.start == 5000
    assert summary.time.stop == 6000


def test_all_timestamps_missing_gives_null_bounds():
    summary = summarize_records([_record("passed", start=None, stop=None)])

    assert summary.statistic.total == 1
    assert summary.time.start is None
    assert summary.time.stop is None


def test_missing_timestamps_as_now_in_legacy_mode():
    records = [
        _record("passed", start=None, stop=None),
        _record("passed", start=5000, stop=6000),
    ]

    summary = summarize_records(records, missing_time_as_now=True, now_ms=10_000)

    assert summary.time.start == 5000
    assert summary.time.stop == 10_000


def test_total_files_can_exceed_total():
    summary = summarize_records([_record("passed")], total_files=3)

    assert summary.statistic.total == 1
    assert summary.total_files == 3
