"""Cache package"""
from .reports_cache import CacheEntry, CacheState, ReportsCache

__all__ = ["CacheEntry", "CacheState", "ReportsCache"]
