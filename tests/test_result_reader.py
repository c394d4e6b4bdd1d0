"""Tests for the result reader."""

import pytest

from allure_dashboard.errors import StorageError
from allure_dashboard.models.test_result import TestResultRecord
from allure_dashboard.services.result_reader import ResultReader, filter_results, parse_record

from conftest import FakeStorage, result_file


@pytest.fixture
def reader(storage: FakeStorage) -> ResultReader:
    return ResultReader(storage, concurrency=2)


async def test_reads_result_files_in_listing_order(storage: FakeStorage, reader: ResultReader):
    storage.put("reports/run-1/b-result.json", result_file("second", "failed"))
    storage.put("reports/run-1/a-result.json", result_file("first", "passed"))
    storage.put("reports/run-1/log.txt", b"not json")
    storage.put("reports/run-1/a-container.json", {"name": "container"})
    storage.put("reports/run-2/c-result.json", result_file("other run", "passed"))

    results = await reader.read_run("run-1")

    assert [r.name for r in results.records] == ["second", "first"]
    assert results.candidate_files == 2
    assert all(r.run_id == "run-1" for r in results.records)
    assert results.records[0].s3_key == "reports/run-1/b-result.json"


async def test_skips_unparseable_and_unreadable_files(storage: FakeStorage, reader: ResultReader):
    storage.put("reports/run-1/ok-result.json", result_file("ok", "passed"))
    storage.put("reports/run-1/bad-result.json", b"{not valid json")
    storage.put("reports/run-1/gone-result.json", result_file("gone", "passed"))
    storage.put("reports/run-1/nostatus-result.json", {"name": "no status"})
    storage.put("reports/run-1/badtime-result.json", result_file("t", "passed", start="soon"))
    storage.failing_reads.add("reports/run-1/gone-result.json")

    results = await reader.read_run("run-1")

    assert [r.name for r in results.records] == ["ok"]
    assert results.candidate_files == 5


async def test_listing_failure_propagates(storage: FakeStorage, reader: ResultReader):
    storage.failing_lists.add("reports/run-1/")

    with pytest.raises(StorageError):
        await reader.read_run("run-1")


async def test_empty_run(reader: ResultReader):
    results = await reader.read_run("missing")

    assert results.records == []
    assert results.candidate_files == 0


def test_parse_record_keeps_extra_allure_fields():
    record = parse_record(
        {"name": "t", "status": "passed", "uuid": "abc", "labels": [{"name": "suite"}]},
        "run-1",
        "reports/run-1/x-result.json",
    )

    assert record.run_id == "run-1"
    assert record.model_extra["uuid"] == "abc"


def test_parse_record_ignores_non_results():
    assert parse_record(["a", "list"], "run-1", "k") is None
    assert parse_record({"name": "", "status": "passed"}, "run-1", "k") is None


def _records():
    return [
        TestResultRecord(name="Login works", status="passed", run_id="r"),
        TestResultRecord(name="Logout", full_name="auth.Logout", status="failed", run_id="r"),
        TestResultRecord(name="Call", description="Outbound LOGIN flow", status="broken", run_id="r"),
    ]


def test_filter_by_status():
    assert [r.name for r in filter_results(_records(), status="failed")] == ["Logout"]


def test_filter_all_status_keeps_everything():
    assert len(filter_results(_records(), status="all")) == 3
    assert len(filter_results(_records(), status="")) == 3


def test_filter_search_is_case_insensitive_across_fields():
    names = [r.name for r in filter_results(_records(), search="  login ")]

    assert names == ["Login works", "Call"]


def test_filter_by_status_and_search():
    assert [r.name for r in filter_results(_records(), status="failed", search="auth")] == ["Logout"]
