"""
Comparison Engine - differences between two run summaries
"""
from typing import Optional

from ..models.comparison import (
    CategoryChange,
    ComparisonResult,
    Differences,
    Percentages,
    ReportView,
    StatusPercentages,
    Trend,
)
from ..models.summary import RunCatalogEntry, Statistic

CATEGORIES = ["total", "passed", "failed", "broken", "skipped"]
STATUS_CATEGORIES = ["passed", "failed", "broken", "skipped"]

# More of these is worse
NEGATIVE_CATEGORIES = {"failed", "broken", "skipped"}


def classify_difference(category: str, diff: int) -> Trend:
    """
    Classify a difference as improvement or regression.

    For total/passed an increase is an improvement; for failed, broken and
    skipped an increase is a regression.
    """
    if diff == 0:
        return Trend.UNCHANGED
    if category in NEGATIVE_CATEGORIES:
        return Trend.REGRESSION if diff > 0 else Trend.IMPROVEMENT
    return Trend.IMPROVEMENT if diff > 0 else Trend.REGRESSION


def percent_change(value1: int, value2: int) -> Optional[float]:
    """
    Percent change from value1 to value2, rounded to one decimal.

    When the baseline is 0 the result is ``value2 * 100`` (0 -> 4 reads as
    400), kept for compatibility with the dashboard's detail table.
    Returns None ("N/A") when both values are 0.
    """
    if value1 > 0:
        return round((value2 - value1) / value1 * 100, 1)
    if value2 > 0:
        return round(value2 * 100.0, 1)
    return None


def status_percentages(stats: Statistic) -> StatusPercentages:
    """Share of each status in the report's own total (0 when empty)."""
    if stats.total == 0:
        return StatusPercentages()
    return StatusPercentages(**{
        status: getattr(stats, status) / stats.total * 100
        for status in STATUS_CATEGORIES
    })


def _view(entry: RunCatalogEntry) -> ReportView:
    return ReportView(
        name=entry.run_id,
        stats=entry.summary.statistic,
        total_files=entry.summary.total_files,
        time=entry.summary.time,
    )


def compare_reports(
    report1: Optional[RunCatalogEntry],
    report2: Optional[RunCatalogEntry]
) -> Optional[ComparisonResult]:
    """
    Compare two runs. Differences are report2 minus report1.

    Args:
        report1: Baseline run
        report2: Run compared against the baseline

    Returns:
        ComparisonResult, or None when either run is missing
    """
    if report1 is None or report2 is None:
        return None

    view1 = _view(report1)
    view2 = _view(report2)

    diffs = {
        category: getattr(view2.stats, category) - getattr(view1.stats, category)
        for category in CATEGORIES
    }

    changes = []
    for category in CATEGORIES:
        value1 = getattr(view1.stats, category)
        value2 = getattr(view2.stats, category)
        trend = classify_difference(category, diffs[category])
        changes.append(CategoryChange(
            category=category,
            value1=value1,
            value2=value2,
            diff=diffs[category],
            percent_change=percent_change(value1, value2),
            trend=trend,
            icon=trend.icon,
        ))

    return ComparisonResult(
        report1=view1,
        report2=view2,
        differences=Differences(
            files=view2.total_files - view1.total_files,
            **diffs
        ),
        percentages=Percentages(
            report1=status_percentages(view1.stats),
            report2=status_percentages(view2.stats),
        ),
        changes=changes,
    )


async def compare_cached(cache, run_id1: str, run_id2: str) -> Optional[ComparisonResult]:
    """
    Compare two runs taken from a ReportsCache.

    Uses cached data while it is fresh; returns None if a run is unknown.
    """
    payload = await cache.get()
    return compare_reports(payload.find(run_id1), payload.find(run_id2))
