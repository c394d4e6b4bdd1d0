"""
Dashboard Client - async HTTP client for the dashboard API
Pairs an API client with a per-session ReportsCache.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from .cache.reports_cache import ReportsCache
from .config import settings
from .errors import AuthenticationError, DashboardError, ReportNotFoundError, TokenError
from .models.comparison import ComparisonResult
from .models.summary import ReportsPayload
from .services.comparison import compare_cached

logger = logging.getLogger(__name__)


class DashboardClient:
    """
    Thin async client for the dashboard HTTP API.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5003",
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def login(self, email: str, password: str) -> str:
        """
        Log in and remember the token.

        Raises:
            AuthenticationError: on rejected credentials
        """
        response = await self.http.post("/login", json={"email": email, "password": password})
        if response.status_code == 400:
            raise AuthenticationError(response.json().get("detail", "Invalid credentials"))
        response.raise_for_status()
        self.token = response.json()["token"]
        return self.token

    async def dashboard(self) -> Dict[str, Any]:
        response = await self.http.get("/dashboard", headers=self._headers())
        if response.status_code in (401, 403):
            raise TokenError(response.json().get("detail", "Unauthorized"), response.status_code)
        response.raise_for_status()
        return response.json()

    async def fetch_reports(self) -> ReportsPayload:
        """
        Fetch the run catalog.

        Raises:
            DashboardError: when the server reports an error
        """
        response = await self.http.get("/api/reports", headers=self._headers())
        if response.status_code != 200:
            raise DashboardError(f"HTTP error! status: {response.status_code}")
        return ReportsPayload.model_validate(response.json())

    async def download_report(self, run_id: str, destination: Path) -> Path:
        """
        Stream a run's ZIP archive to ``destination`` (file or directory).

        Raises:
            ReportNotFoundError: if the run has no files

        A partially written file is removed if the stream fails.
        """
        destination = Path(destination)
        if destination.is_dir():
            destination = destination / f"{run_id}.zip"

        async with self.http.stream(
            "GET", f"/api/download-report/{run_id}", headers=self._headers()
        ) as response:
            if response.status_code == 404:
                raise ReportNotFoundError(run_id)
            if response.status_code != 200:
                await response.aread()
                raise DashboardError(f"Download failed with status {response.status_code}")

            try:
                with destination.open("wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
            except Exception:
                logger.error(f"Download of {run_id} interrupted, removing {destination}")
                destination.unlink(missing_ok=True)
                raise

        logger.info(f"Downloaded {run_id} to {destination}")
        return destination

    async def health(self) -> Dict[str, Any]:
        response = await self.http.get("/api/health")
        response.raise_for_status()
        return response.json()

    async def aclose(self):
        await self.http.aclose()


class DashboardSession:
    """
    One user's view of the dashboard: an API client plus its own cache.
    """

    def __init__(self, client: DashboardClient, stale_after: Optional[float] = None):
        self.client = client
        if stale_after is None:
            stale_after = settings.CACHE_STALE_SECONDS
        self.cache = ReportsCache(client.fetch_reports, stale_after=stale_after)

    @property
    def is_authenticated(self) -> bool:
        return self.client.token is not None

    async def login(self, email: str, password: str) -> str:
        return await self.client.login(email, password)

    def logout(self):
        """Forget the token and drop cached data."""
        self.client.token = None
        self.cache.clear()

    async def reports(self, force_refresh: bool = False) -> ReportsPayload:
        return await self.cache.get(force_refresh)

    async def compare(self, run_id1: str, run_id2: str) -> Optional[ComparisonResult]:
        """Compare two runs using cached summaries."""
        return await compare_cached(self.cache, run_id1, run_id2)
