"""
Utility helper functions
"""
import re
import time
from datetime import datetime, timezone
from typing import Optional


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """
    Sanitize a download file stem for a quoted Content-Disposition value.

    Only quotes and line breaks are removed; the caller appends the extension.

    Args:
        name: Original name, without extension
        max_length: Maximum length of the returned stem

    Returns:
        Sanitized file stem
    """
    sanitized = re.sub(r'["\r\n]', "", name)
    return sanitized[:max_length] or "report"


def timestamp_now() -> str:
    """Get current UTC timestamp as ISO format string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def epoch_ms_now() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_age(last_fetched: Optional[float], now: Optional[float] = None) -> str:
    """
    Describe how long ago data was fetched.

    Args:
        last_fetched: Fetch time in epoch seconds, or None
        now: Current time in epoch seconds

    Returns:
        "No data cached", "Just updated", "1 minute ago" or "N minutes ago"
    """
    if last_fetched is None:
        return "No data cached"

    if now is None:
        now = time.time()
    minutes = int((now - last_fetched) // 60)

    if minutes < 1:
        return "Just updated"
    elif minutes == 1:
        return "1 minute ago"
    else:
        return f"{minutes} minutes ago"
