"""
FastAPI Main Application - Allure Dashboard
"""
import asyncio
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from .auth import Authenticator, bearer_token
from .config import Settings, StorageOverrides, resolve_storage_config, settings
from .errors import AuthenticationError, DashboardError, ReportNotFoundError, TokenError
from .models.summary import RunCatalogEntry
from .services.archive_builder import ArchiveBuilder
from .services.catalog import RunCatalog
from .services.comparison import compare_reports
from .services.result_reader import filter_results
from .services.summarizer import summarize_records
from .storage.s3_storage import S3Storage
from .utils.helpers import sanitize_filename, timestamp_now

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    description="Lists, compares and downloads Allure result bundles stored in S3",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response Models
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


def error_response(status_code: int, error: str, details: str = "") -> JSONResponse:
    """Structured error body used by the data endpoints."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": details, "timestamp": timestamp_now()}
    )


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(500, "Request failed", str(exc))


# Dependencies
def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_authenticator() -> Authenticator:
    return Authenticator.from_settings(settings)


def get_storage(
    x_aws_access_key: Optional[str] = Header(None),
    x_aws_secret_key: Optional[str] = Header(None),
    x_aws_region: Optional[str] = Header(None),
    x_s3_bucket: Optional[str] = Header(None),
    config: Settings = Depends(get_settings)
) -> S3Storage:
    """Storage for this request; headers override the environment."""
    overrides = StorageOverrides(
        access_key=x_aws_access_key,
        secret_key=x_aws_secret_key,
        region=x_aws_region,
        bucket=x_s3_bucket,
    )
    return S3Storage.from_config(resolve_storage_config(overrides, config))


def require_api_auth(
    authorization: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
    authenticator: Authenticator = Depends(get_authenticator)
):
    """Bearer check for data endpoints, active when PROTECT_API is set."""
    if not config.PROTECT_API:
        return None
    try:
        return authenticator.verify_token(bearer_token(authorization))
    except TokenError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


# Authentication endpoints
@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "docs": "/docs"}


@app.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator)
):
    """
    Exchange the configured email/password for a bearer token.
    """
    try:
        token = authenticator.login(request.email, request.password)
    except AuthenticationError as e:
        logger.info(f"Rejected login: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return TokenResponse(token=token)


@app.post("/debug/token")
async def debug_token(
    config: Settings = Depends(get_settings),
    authenticator: Authenticator = Depends(get_authenticator)
):
    """
    Issue a fresh token without credentials. Only available in DEBUG mode.
    """
    if not config.DEBUG:
        raise HTTPException(status_code=404, detail="Not Found")

    return {
        "token": authenticator.create_token(),
        "message": "Fresh token generated",
        "expiresAt": authenticator.token_expiry().isoformat()
    }


@app.get("/dashboard")
async def dashboard(
    authorization: Optional[str] = Header(None),
    authenticator: Authenticator = Depends(get_authenticator)
):
    """
    Protected landing endpoint.
    """
    try:
        user = authenticator.verify_token(bearer_token(authorization))
    except TokenError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return {"message": "Welcome to Dashboard", "user": user}


# Report endpoints
@app.get("/api/reports", dependencies=[Depends(require_api_auth)])
async def list_reports(
    storage: S3Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    List every stored run with its summary plus overall totals.
    """
    logger.info("Fetching Allure reports from S3")
    try:
        payload = await RunCatalog(storage, config=config).build()
    except Exception as e:
        logger.exception("Error fetching reports")
        return error_response(500, "Failed to fetch reports", str(e))

    logger.info(f"Successfully fetched {len(payload.reports)} reports")
    return payload.model_dump(by_alias=True, mode="json")


@app.get("/api/reports/{run_id}/results", dependencies=[Depends(require_api_auth)])
async def get_run_results(
    run_id: str,
    status: Optional[str] = None,
    search: Optional[str] = None,
    storage: S3Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Get the individual test results of a run, optionally filtered.
    The summary always covers the whole run.
    """
    catalog = RunCatalog(storage, config=config)
    try:
        results = await catalog.reader.read_run(run_id)
    except Exception as e:
        logger.exception(f"Error fetching results for run {run_id}")
        return error_response(500, "Failed to fetch test results", str(e))

    summary = summarize_records(
        results.records,
        total_files=results.candidate_files,
        run_id=run_id,
        missing_time_as_now=config.SUMMARY_MISSING_TIME_AS_NOW,
    )
    filtered = filter_results(results.records, status=status, search=search)

    return {
        "runId": run_id,
        "results": [r.model_dump(by_alias=True, mode="json") for r in filtered],
        "summary": summary.model_dump(by_alias=True, mode="json")
    }


@app.get("/api/compare", dependencies=[Depends(require_api_auth)])
async def compare(
    report1: Optional[str] = None,
    report2: Optional[str] = None,
    storage: S3Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Compare two runs. Differences are report2 minus report1.
    """
    if not report1 or not report2:
        raise HTTPException(status_code=400, detail="report1 and report2 are required")

    catalog = RunCatalog(storage, config=config)
    try:
        summary1, summary2 = await asyncio.gather(
            catalog.summarize_run(report1),
            catalog.summarize_run(report2)
        )
    except Exception as e:
        logger.exception(f"Error comparing {report1} and {report2}")
        return error_response(500, "Failed to compare reports", str(e))

    result = compare_reports(
        RunCatalogEntry(run_id=report1, summary=summary1),
        RunCatalogEntry(run_id=report2, summary=summary2)
    )
    return result.model_dump(by_alias=True, mode="json")


async def _zip_download(
    run_id: str,
    storage: S3Storage,
    config: Settings,
    extension: str = ".zip",
    suffix: Optional[str] = None
):
    if not run_id or not run_id.strip():
        return JSONResponse(status_code=400, content={"error": "RunId is required"})

    logger.info(f"Creating download for runId: {run_id}")
    builder = ArchiveBuilder(
        storage,
        reports_prefix=config.REPORTS_PREFIX,
        compression_level=config.ARCHIVE_COMPRESSION_LEVEL,
        chunk_size=config.ARCHIVE_CHUNK_SIZE,
    )

    try:
        objects = await builder.prepare(run_id, suffix=suffix)
    except ReportNotFoundError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"Error creating download for {run_id}")
        return error_response(500, "Failed to create download", str(e))

    filename = f"{sanitize_filename(run_id)}{extension}"

    # Errors past this point can only truncate the stream
    return StreamingResponse(
        builder.stream(objects),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@app.get("/api/download-report/", dependencies=[Depends(require_api_auth)])
async def download_report_missing_id():
    return JSONResponse(status_code=400, content={"error": "RunId is required"})


@app.get("/api/download-report/{run_id}", dependencies=[Depends(require_api_auth)])
async def download_report(
    run_id: str,
    storage: S3Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Stream all files of a run as ``<runId>.zip``.
    """
    return await _zip_download(run_id, storage, config)


@app.get("/api/download-logs/{run_id}", dependencies=[Depends(require_api_auth)])
async def download_logs(
    run_id: str,
    storage: S3Storage = Depends(get_storage),
    config: Settings = Depends(get_settings)
):
    """
    Stream only the log files (``.txt``) of a run.
    """
    return await _zip_download(
        run_id, storage, config,
        extension="-logs.zip",
        suffix=config.LOG_FILE_SUFFIX
    )


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Allure Download Service is running",
        "timestamp": timestamp_now()
    }


def run():
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
