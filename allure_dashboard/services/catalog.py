"""
Run Catalog - enumerates stored runs and summarizes each of them
"""
import asyncio
from typing import List, Optional

from .base_service import BaseService
from .result_reader import ResultReader
from .summarizer import summarize_records
from ..config import Settings, settings
from ..errors import StorageError
from ..models.summary import CatalogSummary, ReportsPayload, RunCatalogEntry, RunSummary
from ..utils.helpers import timestamp_now


class RunCatalog(BaseService):
    """
    Builds the list of runs shown on the dashboard:
    - lists run folders under the reports prefix
    - reads and summarizes every run in parallel
    - keeps storage listing order in the result
    - isolates failures per run
    """

    def __init__(
        self,
        storage,
        reader: Optional[ResultReader] = None,
        config: Optional[Settings] = None
    ):
        super().__init__("RunCatalog")
        self.config = config or settings
        self.storage = storage
        self.reader = reader or ResultReader(
            storage,
            reports_prefix=self.config.REPORTS_PREFIX,
            result_suffix=self.config.RESULT_FILE_SUFFIX,
            concurrency=self.config.READER_CONCURRENCY,
        )

    async def list_run_ids(self) -> List[str]:
        """
        List run identifiers in storage listing order.

        Raises:
            StorageError: if the bucket cannot be listed
        """
        search_prefix = f"{self.config.REPORTS_PREFIX}{self.config.RUN_FOLDER_PREFIX}"
        prefixes = await asyncio.to_thread(self.storage.list_prefixes, search_prefix)

        run_ids = []
        for prefix in prefixes:
            run_id = prefix[len(self.config.REPORTS_PREFIX):].rstrip("/")
            if run_id:
                run_ids.append(run_id)

        self.log_info(f"Found {len(run_ids)} runs")
        return run_ids

    async def summarize_run(self, run_id: str) -> RunSummary:
        """Read and summarize a single run."""
        results = await self.reader.read_run(run_id)
        return summarize_records(
            results.records,
            total_files=results.candidate_files,
            run_id=run_id,
            missing_time_as_now=self.config.SUMMARY_MISSING_TIME_AS_NOW,
        )

    async def build(self) -> ReportsPayload:
        """
        Build the full catalog.

        Returns:
            ReportsPayload with one entry per run and overall totals
        """
        run_ids = await self.list_run_ids()
        semaphore = asyncio.Semaphore(max(1, self.config.CATALOG_CONCURRENCY))

        async def entry_for(run_id: str) -> RunCatalogEntry:
            async with semaphore:
                try:
                    summary = await self.summarize_run(run_id)
                except StorageError as e:
                    self.log_error(f"Failed to summarize run {run_id}: {e}")
                    return RunCatalogEntry(
                        run_id=run_id,
                        summary=RunSummary(run_id=run_id),
                        error=str(e),
                    )
                return RunCatalogEntry(run_id=run_id, summary=summary)

        # gather preserves argument order
        entries = await asyncio.gather(*(entry_for(run_id) for run_id in run_ids))

        return ReportsPayload(
            reports=list(entries),
            summary=CatalogSummary(
                total_reports=len(entries),
                total_tests=sum(e.summary.statistic.total for e in entries),
                last_updated=timestamp_now(),
            ),
        )
