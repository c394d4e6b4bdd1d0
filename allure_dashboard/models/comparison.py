"""
Comparison Result Data Model
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .summary import Statistic, TimeBounds


class Trend(str, Enum):
    """Direction of a change between two runs."""

    IMPROVEMENT = "improvement"
    REGRESSION = "regression"
    UNCHANGED = "unchanged"

    @property
    def icon(self) -> str:
        if self is Trend.IMPROVEMENT:
            return "↗"
        if self is Trend.REGRESSION:
            return "↘"
        return ""


class ReportView(BaseModel):
    """One side of a comparison."""

    name: str
    stats: Statistic
    total_files: int = Field(default=0, alias="totalFiles")
    time: TimeBounds = Field(default_factory=TimeBounds)

    class Config:
        populate_by_name = True


class Differences(BaseModel):
    """report2 minus report1, per category."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    files: int = 0


class StatusPercentages(BaseModel):
    """Share of each status in a report's own total, in percent."""

    passed: float = 0.0
    failed: float = 0.0
    broken: float = 0.0
    skipped: float = 0.0


class Percentages(BaseModel):
    report1: StatusPercentages = Field(default_factory=StatusPercentages)
    report2: StatusPercentages = Field(default_factory=StatusPercentages)


class CategoryChange(BaseModel):
    """Detail row for one category."""

    category: str
    value1: int
    value2: int
    diff: int
    percent_change: Optional[float] = Field(default=None, alias="percentChange")
    trend: Trend
    icon: str = ""

    class Config:
        populate_by_name = True


class ComparisonResult(BaseModel):
    """Differences between two run summaries."""

    report1: ReportView
    report2: ReportView
    differences: Differences
    percentages: Percentages
    changes: List[CategoryChange] = Field(default_factory=list)
