"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_mongo_settings() -> "MongoSettings":
    """Build MongoDB settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return MongoSettings()  # type: ignore[call-arg]


def _build_session_settings() -> "SessionSettings":
    """Build session settings from environment.

    See _build_mongo_settings() for rationale about the type ignore.
    """

    return SessionSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class MongoSettings(BaseSettings):
    """MongoDB connection configuration for the participant registry."""

    uri: str = Field(
        ...,
        description="MongoDB connection string (e.g., mongodb://localhost:27017)",
    )
    db_name: str = Field(
        "hackoverflow",
        description="Database holding the participants collection",
    )
    participants_collection: str = Field(
        "participants",
        description="Collection name for participant documents",
    )
    max_pool_size: int = Field(10, ge=1)
    min_pool_size: int = Field(2, ge=0)
    max_idle_time_ms: int = Field(30000, ge=0)
    connect_timeout_ms: int = Field(10000, ge=1)
    socket_timeout_ms: int = Field(45000, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        case_sensitive=False,
    )


class SessionSettings(BaseSettings):
    """Signed cookie session configuration."""

    secret: str = Field(
        ...,
        min_length=32,
        description="Secret used to sign session cookies (at least 32 characters)",
    )
    cookie_name: str = Field("hackoverflow_session")
    max_age_seconds: int = Field(
        8 * 60 * 60,
        ge=60,
        description="Session lifetime in seconds",
    )
    https_only: bool = Field(
        False,
        description="Mark the session cookie as Secure (enable in production)",
    )
    same_site: Literal["lax", "strict", "none"] = Field("lax")

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json")
    output: Literal["stdout", "file"] = Field("stdout")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        ge=0,
        description="Rotate log file after this size (0 disables rotation)",
    )
    backup_count: int = Field(5, ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate request ids",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    staff_api_key_required: bool = Field(
        True,
        description="Whether staff endpoints require an X-API-Key header",
    )
    staff_api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid staff API keys",
    )
    participants_default_limit: int = Field(
        50,
        ge=1,
        description="Default number of participants returned by the list endpoint",
    )
    participants_max_limit: int = Field(
        100,
        ge=1,
        description="Upper bound accepted for the list endpoint limit",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_cleanup_interval_seconds: float = Field(
        300.0,
        gt=0,
        description="How often stale limiter entries are swept",
    )
    action_rate_limit_requests: int = Field(
        100,
        ge=1,
        description="General-purpose limiter: requests allowed per window",
    )
    action_rate_limit_window_ms: int = Field(60000, ge=1000)
    checkin_rate_limit_requests: int = Field(
        10,
        ge=1,
        description="Check-in limiter: requests allowed per window",
    )
    checkin_rate_limit_window_ms: int = Field(60000, ge=1000)
    database_rate_limit_requests: int = Field(
        30,
        ge=1,
        description="Database status limiter: requests allowed per window",
    )
    database_rate_limit_window_ms: int = Field(60000, ge=1000)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are missing.
    """

    app_env: str = APP_ENV
    mongo: MongoSettings = Field(default_factory=_build_mongo_settings)
    session: SessionSettings = Field(default_factory=_build_session_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
