"""
Configuration settings for the Allure Dashboard backend
"""
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Allure Dashboard"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5003
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Authentication
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_HOURS: int = 24
    AUTH_USER_ID: int = 1
    AUTH_EMAIL: str = "test@example.com"
    AUTH_PASSWORD: Optional[str] = None
    AUTH_PASSWORD_HASH: Optional[str] = None  # bcrypt, preferred over AUTH_PASSWORD
    PROTECT_API: bool = False

    # S3 storage (VITE_ names are read for compatibility with the frontend .env)
    AWS_REGION: str = Field(
        default="eu-north-1",
        validation_alias=AliasChoices("AWS_REGION", "VITE_AWS_REGION"),
    )
    AWS_ACCESS_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AWS_ACCESS_KEY", "VITE_AWS_ACCESS_KEY"),
    )
    AWS_SECRET_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AWS_SECRET_KEY", "VITE_AWS_SECRET_KEY"),
    )
    S3_BUCKET: str = Field(
        default="allure-report-telephony",
        validation_alias=AliasChoices("S3_BUCKET", "VITE_S3_BUCKET"),
    )

    # Report layout
    REPORTS_PREFIX: str = "reports/"
    RUN_FOLDER_PREFIX: str = "allure-results-"
    RESULT_FILE_SUFFIX: str = "-result.json"
    LOG_FILE_SUFFIX: str = ".txt"

    # Aggregation
    CATALOG_CONCURRENCY: int = 8
    READER_CONCURRENCY: int = 16
    SUMMARY_MISSING_TIME_AS_NOW: bool = False

    # Archive
    ARCHIVE_COMPRESSION_LEVEL: int = 1
    ARCHIVE_CHUNK_SIZE: int = 64 * 1024

    # Client cache
    CACHE_STALE_SECONDS: int = 300

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


settings = Settings()


class StorageConfig(BaseModel):
    """Resolved S3 connection parameters for one request."""

    region: str
    access_key: str
    secret_key: str
    bucket: str


class StorageOverrides(BaseModel):
    """Per-request values that take precedence over the environment."""

    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    bucket: Optional[str] = None


def resolve_storage_config(
    overrides: Optional[StorageOverrides] = None,
    base: Optional[Settings] = None
) -> StorageConfig:
    """
    Resolve storage configuration.

    Each value comes from the explicit override when given, otherwise from
    the environment settings. Missing credentials raise ConfigurationError.

    Args:
        overrides: Per-request values (may be None)
        base: Settings to fall back on. Defaults to the module settings

    Returns:
        Fully populated StorageConfig
    """
    base = base or settings
    overrides = overrides or StorageOverrides()

    access_key = overrides.access_key or base.AWS_ACCESS_KEY
    secret_key = overrides.secret_key or base.AWS_SECRET_KEY

    if not access_key or not secret_key:
        raise ConfigurationError(
            "AWS credentials not configured. Set AWS_ACCESS_KEY and AWS_SECRET_KEY."
        )

    return StorageConfig(
        region=overrides.region or base.AWS_REGION,
        access_key=access_key,
        secret_key=secret_key,
        bucket=overrides.bucket or base.S3_BUCKET,
    )
