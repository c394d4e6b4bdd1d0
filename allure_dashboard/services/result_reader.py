"""
Result Reader - loads Allure per-test result files for a run
"""
import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from .base_service import BaseService
from ..errors import StorageError
from ..models.test_result import TestResultRecord


@dataclass
class RunResults:
    """Records read for one run plus the number of candidate files seen."""

    run_id: str
    records: List[TestResultRecord] = field(default_factory=list)
    candidate_files: int = 0


def parse_record(data: Any, run_id: str, key: str) -> Optional[TestResultRecord]:
    """
    Turn a decoded result document into a TestResultRecord.

    Documents without both a ``name`` and a ``status`` are not test results
    (containers, attachments metadata) and yield None.
    """
    if not isinstance(data, dict) or not data.get("name") or not data.get("status"):
        return None
    return TestResultRecord.model_validate({**data, "runId": run_id, "s3Key": key})


def filter_results(
    records: Iterable[TestResultRecord],
    status: Optional[str] = None,
    search: Optional[str] = None
) -> List[TestResultRecord]:
    """
    Filter records by exact status and a case-insensitive search term.

    Args:
        records: Records to filter
        status: Status to keep; empty or "all" keeps every status
        search: Substring matched against name, full name and description

    Returns:
        Matching records in their original order
    """
    filtered = list(records)

    if status and status != "all":
        filtered = [r for r in filtered if r.status == status]

    term = (search or "").strip().lower()
    if term:
        filtered = [
            r for r in filtered
            if term in r.name.lower()
            or term in (r.full_name or "").lower()
            or term in (r.description or "").lower()
        ]

    return filtered


class ResultReader(BaseService):
    """
    Reads ``*-result.json`` files stored under ``<reports_prefix><runId>/``.
    A file that cannot be read or parsed is logged and skipped.
    """

    def __init__(
        self,
        storage,
        reports_prefix: str = "reports/",
        result_suffix: str = "-result.json",
        concurrency: int = 16
    ):
        super().__init__("ResultReader")
        self.storage = storage
        self.reports_prefix = reports_prefix
        self.result_suffix = result_suffix
        self.concurrency = max(1, concurrency)

    def run_prefix(self, run_id: str) -> str:
        return f"{self.reports_prefix}{run_id}/"

    async def read_run(self, run_id: str) -> RunResults:
        """
        Read all test results of a run.

        Args:
            run_id: Run identifier (folder name under the reports prefix)

        Returns:
            RunResults with records in storage listing order

        Raises:
            StorageError: if the run folder cannot be listed
        """
        objects = await asyncio.to_thread(self.storage.list_objects, self.run_prefix(run_id))
        candidates = [obj for obj in objects if obj.key.endswith(self.result_suffix)]

        self.log_debug(f"Found {len(candidates)} result files for run {run_id}")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def load(key: str) -> Optional[TestResultRecord]:
            async with semaphore:
                return await asyncio.to_thread(self._load_record, run_id, key)

        loaded = await asyncio.gather(*(load(obj.key) for obj in candidates))
        records = [record for record in loaded if record is not None]

        self.log_info(
            f"Processed {len(records)} test results for run {run_id} "
            f"({len(candidates)} candidate files)"
        )
        return RunResults(run_id=run_id, records=records, candidate_files=len(candidates))

    def _load_record(self, run_id: str, key: str) -> Optional[TestResultRecord]:
        try:
            raw = self.storage.read_bytes(key)
            data = json.loads(raw.decode("utf-8"))
        except (StorageError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self.log_warning(f"Skipping unreadable result file {key}: {e}")
            return None

        try:
            return parse_record(data, run_id, key)
        except ValidationError as e:
            self.log_warning(f"Skipping malformed result file {key}: {e.error_count()} errors")
            return None
