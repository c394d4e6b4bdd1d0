"""
Run Summary Data Models
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class Statistic(BaseModel):
    """Counts of test results by status."""

    total: int = Field(default=0, ge=0)
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    broken: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)


class TimeBounds(BaseModel):
    """Earliest start and latest stop of a run (epoch ms)."""

    start: Optional[int] = None
    stop: Optional[int] = None


class RunSummary(BaseModel):
    """Aggregate statistics for one test run."""

    run_id: Optional[str] = Field(default=None, alias="runId")
    statistic: Statistic = Field(default_factory=Statistic)
    time: TimeBounds = Field(default_factory=TimeBounds)
    total_files: int = Field(default=0, ge=0, alias="totalFiles")

    class Config:
        frozen = True
        populate_by_name = True


class RunCatalogEntry(BaseModel):
    """One known run and its summary."""

    run_id: str = Field(..., alias="runId")
    summary: RunSummary = Field(default_factory=RunSummary)
    error: Optional[str] = None

    class Config:
        populate_by_name = True


class CatalogSummary(BaseModel):
    """Totals across all runs in the catalog."""

    total_reports: int = Field(default=0, alias="totalReports")
    total_tests: int = Field(default=0, alias="totalTests")
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")

    class Config:
        populate_by_name = True


class ReportsPayload(BaseModel):
    """Response body of ``GET /api/reports``."""

    reports: List[RunCatalogEntry] = Field(default_factory=list)
    summary: Optional[CatalogSummary] = None

    def find(self, run_id: str) -> Optional[RunCatalogEntry]:
        """Return the entry for ``run_id`` if present."""
        for entry in self.reports:
            if entry.run_id == run_id:
                return entry
        return None
