"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gateway.core.errors import ConfigurationAppError
from gateway.utils.durations import parse_duration


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


DEFAULT_ROUTES: dict[str, str] = {
    "health": "/health",
    "get_items": "/items",
    "create_item": "/items",
}


class ServerSettings(BaseSettings):
    """HTTP server binding and lifecycle configuration."""

    host: str = Field("0.0.0.0", description="Interface to bind the HTTP server to")
    port: int = Field(8080, description="TCP port to listen on", ge=1, le=65535)
    graceful_shutdown_seconds: int = Field(
        5,
        description="Seconds to wait for in-flight requests on shutdown",
        ge=0,
    )
    keep_alive_seconds: int = Field(
        30,
        description="Idle keep-alive timeout for client connections",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level (DEBUG, INFO, WARNING, ...)")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(
        None,
        description="Log file path when output=file (default logs/app.log)",
    )
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size in bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ApiSettings(BaseSettings):
    """Public API versioning and route paths."""

    version: str = Field("v1", description="API version used in the /api/{version} prefix")
    routes: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ROUTES),
        description="Route paths keyed by name (health, get_items, create_item)",
    )

    model_config = SettingsConfigDict(
        env_prefix="API_",
        case_sensitive=False,
    )

    @field_validator("routes")
    @classmethod
    def _fill_missing_routes(cls, value: dict[str, str]) -> dict[str, str]:
        return {**DEFAULT_ROUTES, **value}

    def route(self, name: str) -> str:
        return self.routes[name]


class TelemetrySettings(BaseSettings):
    """Prometheus metrics configuration."""

    enabled: bool = Field(True, description="Record request metrics")
    metrics_endpoint: str = Field(
        "/metrics",
        description="Path serving the Prometheus exposition (empty disables the route)",
    )

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Per-client fixed-window rate limiting."""

    enabled: bool = Field(
        False,
        description="Install the rate limiting middleware ahead of all routes",
    )
    max_requests: int = Field(
        100,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    time_window: str = Field(
        "1m",
        description='Window duration, e.g. "30s", "1m", "1h"',
    )
    include_headers: bool = Field(
        True,
        description="Include a Retry-After header when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )

    @field_validator("time_window")
    @classmethod
    def _validate_time_window(cls, value: str) -> str:
        try:
            window = parse_duration(value)
        except ConfigurationAppError as exc:
            raise ValueError(exc.message) from exc
        if window <= timedelta(0):
            raise ValueError(f"time_window must be positive, got {value!r}")
        return value

    @property
    def window(self) -> timedelta:
        return parse_duration(self.time_window)


def _build_server_settings() -> ServerSettings:
    """Build nested settings from environment.

    Pydantic Settings (v2) populates values from environment variables, but
    static type checkers treat fields with defaults inconsistently on
    BaseSettings subclasses, hence the factory functions.
    """

    return ServerSettings()  # type: ignore[call-arg]


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


def _build_api_settings() -> ApiSettings:
    return ApiSettings()  # type: ignore[call-arg]


def _build_telemetry_settings() -> TelemetrySettings:
    return TelemetrySettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid, so the
    process never starts serving with a half-configured rate limiter.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    server: ServerSettings = Field(default_factory=_build_server_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    api: ApiSettings = Field(default_factory=_build_api_settings)
    telemetry: TelemetrySettings = Field(default_factory=_build_telemetry_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
