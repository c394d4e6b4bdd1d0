"""
Reports Cache - session-scoped cache of the run catalog
Keeps a single slot of catalog data and refreshes it once it goes stale.
"""
import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..models.summary import CatalogSummary, ReportsPayload, RunCatalogEntry
from ..utils.helpers import format_age

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER = 5 * 60  # seconds


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of the cache slot."""

    reports: List[RunCatalogEntry] = field(default_factory=list)
    summary: Optional[CatalogSummary] = None
    last_fetched: Optional[float] = None  # epoch seconds
    loading: bool = False
    error: Optional[str] = None


class ReportsCache:
    """
    Caches the catalog for one client session.

    The cache is constructed explicitly and passed to whoever needs it, so
    each session (or test) owns an independent instance.
    """

    def __init__(
        self,
        fetcher: Callable[[], Awaitable[ReportsPayload]],
        stale_after: float = DEFAULT_STALE_AFTER,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the cache.

        Args:
            fetcher: Coroutine function returning fresh catalog data
            stale_after: Seconds after which cached data is refreshed
            clock: Time source in epoch seconds
        """
        self.fetcher = fetcher
        self.stale_after = stale_after
        self.clock = clock
        self._entry = CacheEntry()
        self._state = CacheState.EMPTY

    @property
    def entry(self) -> CacheEntry:
        return self._entry

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def has_data(self) -> bool:
        return len(self._entry.reports) > 0

    @property
    def is_stale(self) -> bool:
        """True when the cached data is older than the staleness window."""
        if self._entry.last_fetched is None:
            return True
        return self.clock() - self._entry.last_fetched >= self.stale_after

    def should_refresh(self) -> bool:
        """Whether a non-forced get() has to fetch."""
        if self._state is not CacheState.READY:
            return True
        return not self.has_data or self.is_stale

    @property
    def payload(self) -> ReportsPayload:
        return ReportsPayload(reports=list(self._entry.reports), summary=self._entry.summary)

    async def get(self, force_refresh: bool = False) -> ReportsPayload:
        """
        Return catalog data, fetching only when needed.

        Args:
            force_refresh: Fetch even if the cached data is fresh

        Returns:
            Cached or freshly fetched ReportsPayload

        Raises:
            Whatever the fetcher raises; previous data is kept in that case
        """
        if not force_refresh and not self.should_refresh():
            logger.debug("Using cached reports data")
            return self.payload

        logger.info("Fetching fresh reports data")
        self._state = CacheState.LOADING
        self._entry = replace(self._entry, loading=True, error=None)

        try:
            payload = await self.fetcher()
        except Exception as e:
            logger.error(f"Error fetching reports: {e}")
            self._state = CacheState.ERROR
            self._entry = replace(self._entry, loading=False, error=str(e))
            raise

        self._entry = CacheEntry(
            reports=list(payload.reports),
            summary=payload.summary,
            last_fetched=self.clock(),
        )
        self._state = CacheState.READY
        logger.info(f"Cached {len(payload.reports)} reports")
        return self.payload

    def find(self, run_id: str) -> Optional[RunCatalogEntry]:
        """Look up a cached run without fetching."""
        return self.payload.find(run_id)

    def clear(self):
        """Drop all cached data (used on logout)."""
        logger.info("Clearing reports cache")
        self._entry = CacheEntry()
        self._state = CacheState.EMPTY

    def status(self) -> str:
        """Human-readable age of the cached data."""
        return format_age(self._entry.last_fetched, self.clock())
