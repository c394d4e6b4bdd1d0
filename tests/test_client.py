"""Tests for the dashboard API client and session."""

import zipfile

import httpx
import pytest

from allure_dashboard.auth import Authenticator, hash_password
from allure_dashboard.client import DashboardClient, DashboardSession
from allure_dashboard.config import Settings
from allure_dashboard.errors import AuthenticationError, DashboardError, ReportNotFoundError, TokenError
from allure_dashboard.main import app, get_authenticator, get_settings, get_storage

from conftest import FakeStorage, add_run


@pytest.fixture
def asgi_client(storage: FakeStorage, test_settings: Settings):
    authenticator = Authenticator(
        email="test@example.com",
        password_hash=hash_password("s3cret!"),
        secret_key="test-jwt-secret",
    )
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_authenticator] = lambda: authenticator
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    yield DashboardClient(base_url="http://test", http_client=http)
    app.dependency_overrides.clear()


def _mock_client(handler) -> DashboardClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return DashboardClient(base_url="http://test", http_client=http)


async def test_login_and_dashboard(asgi_client: DashboardClient):
    await asgi_client.login("test@example.com", "s3cret!")

    body = await asgi_client.dashboard()

    assert body["user"]["email"] == "test@example.com"
    await asgi_client.aclose()


async def test_login_failure_raises(asgi_client: DashboardClient):
    with pytest.raises(AuthenticationError, match="Invalid password"):
        await asgi_client.login("test@example.com", "nope")

    assert asgi_client.token is None


async def test_dashboard_without_login_raises(asgi_client: DashboardClient):
    with pytest.raises(TokenError) as exc_info:
        await asgi_client.dashboard()

    assert exc_info.value.status_code == 401


async def test_fetch_reports(asgi_client: DashboardClient, storage: FakeStorage):
    add_run(storage, "allure-results-1", ["passed", "broken"])

    payload = await asgi_client.fetch_reports()

    assert payload.reports[0].run_id == "allure-results-1"
    assert payload.reports[0].summary.statistic.broken == 1
    assert payload.summary.total_tests == 2


async def test_download_report(asgi_client: DashboardClient, storage: FakeStorage, tmp_path):
    add_run(storage, "allure-results-1", ["passed"])

    path = await asgi_client.download_report("allure-results-1", tmp_path)

    assert path == tmp_path / "allure-results-1.zip"
    assert zipfile.ZipFile(path).namelist() == ["allure-results-1-0-result.json"]


async def test_download_unknown_report(asgi_client: DashboardClient, tmp_path):
    with pytest.raises(ReportNotFoundError):
        await asgi_client.download_report("missing", tmp_path)


async def test_fetch_reports_server_error():
    client = _mock_client(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(DashboardError, match="500"):
        await client.fetch_reports()


async def test_session_caches_and_clears_on_logout(asgi_client: DashboardClient, storage: FakeStorage):
    add_run(storage, "allure-results-1", ["passed"] * 3)
    add_run(storage, "allure-results-2", ["passed", "failed", "failed"])
    session = DashboardSession(asgi_client)
    await session.login("test@example.com", "s3cret!")

    await session.reports()
    storage.read_calls.clear()
    comparison = await session.compare("allure-results-1", "allure-results-2")

    assert storage.read_calls == []
    assert comparison.differences.failed == 2
    assert session.cache.has_data

    session.logout()

    assert not session.is_authenticated
    assert not session.cache.has_data
    assert session.cache.status() == "No data cached"


async def test_session_uses_configured_staleness_window():
    session = DashboardSession(_mock_client(lambda request: httpx.Response(200, json={})))

    assert session.cache.stale_after == 300


async def test_interrupted_download_removes_partial_file(tmp_path):
    async def broken_body():
        yield b"PK\x03\x04partial"
        raise httpx.ReadError("connection reset")

    client = _mock_client(lambda request: httpx.Response(200, content=broken_body()))

    with pytest.raises(httpx.ReadError):
        await client.download_report("allure-results-1", tmp_path)

    assert not (tmp_path / "allure-results-1.zip").exists()
