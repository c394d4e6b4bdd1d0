"""
Run Summarizer - reduces a run's test results to counts and time bounds
"""
from typing import Optional, Sequence

from ..models.summary import RunSummary, Statistic, TimeBounds
from ..models.test_result import KNOWN_STATUSES, TestResultRecord
from ..utils.helpers import epoch_ms_now


def summarize_records(
    records: Sequence[TestResultRecord],
    total_files: Optional[int] = None,
    run_id: Optional[str] = None,
    missing_time_as_now: bool = False,
    now_ms: Optional[int] = None
) -> RunSummary:
    """
    Summarize the test results of one run.

    Status counts are exact, case-sensitive matches, so records with an
    unrecognised status count towards ``total`` only.

    Records missing ``start`` or ``stop`` are left out of that bound. With
    ``missing_time_as_now`` the current time is used for them instead,
    which reproduces the numbers of the legacy dashboard.

    Args:
        records: Parsed test results
        total_files: Candidate file count; defaults to len(records)
        run_id: Run the records belong to
        missing_time_as_now: Substitute "now" for missing timestamps
        now_ms: Current time in epoch ms (for tests)

    Returns:
        RunSummary; all zeros and null bounds for an empty run
    """
    if total_files is None:
        total_files = len(records)

    if not records:
        return RunSummary(run_id=run_id, total_files=total_files)

    counts = {status.value: 0 for status in KNOWN_STATUSES}
    starts = []
    stops = []

    if missing_time_as_now and now_ms is None:
        now_ms = epoch_ms_now()

    for record in records:
        if record.status in counts:
            counts[record.status] += 1

        if record.start is not None:
            starts.append(record.start)
        elif missing_time_as_now:
            starts.append(now_ms)

        if record.stop is not None:
            stops.append(record.stop)
        elif missing_time_as_now:
            stops.append(now_ms)

    return RunSummary(
        run_id=run_id,
        statistic=Statistic(total=len(records), **counts),
        time=TimeBounds(
            start=min(starts) if starts else None,
            stop=max(stops) if stops else None,
        ),
        total_files=total_files,
    )
