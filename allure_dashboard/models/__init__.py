"""Models package"""
from .test_result import TestResultRecord, TestStatus
from .summary import (
    CatalogSummary,
    ReportsPayload,
    RunCatalogEntry,
    RunSummary,
    Statistic,
    TimeBounds,
)
from .comparison import ComparisonResult, Trend

__all__ = [
    "TestResultRecord",
    "TestStatus",
    "CatalogSummary",
    "ReportsPayload",
    "RunCatalogEntry",
    "RunSummary",
    "Statistic",
    "TimeBounds",
    "ComparisonResult",
    "Trend",
]
