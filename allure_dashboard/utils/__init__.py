"""Utilities package"""
from .helpers import epoch_ms_now, format_age, sanitize_filename, timestamp_now

__all__ = ["epoch_ms_now", "format_age", "sanitize_filename", "timestamp_now"]
