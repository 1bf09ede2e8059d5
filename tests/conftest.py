"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV=testing so no developer .env file leaks into the suite.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "true")

import pytest

from gateway.core.config import RateLimitSettings, Settings, TelemetrySettings


@pytest.fixture
def make_settings():
    """Build isolated Settings with rate limit / telemetry overrides."""

    def _make(
        *,
        rate_limit_enabled: bool = False,
        max_requests: int = 100,
        time_window: str = "1m",
        include_headers: bool = True,
        telemetry_enabled: bool = True,
    ) -> Settings:
        return Settings(
            rate_limit=RateLimitSettings(
                enabled=rate_limit_enabled,
                max_requests=max_requests,
                time_window=time_window,
                include_headers=include_headers,
            ),
            telemetry=TelemetrySettings(enabled=telemetry_enabled),
        )

    return _make
