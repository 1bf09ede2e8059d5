"""Prometheus request metrics.

Each ``Telemetry`` instance owns its own ``CollectorRegistry`` so separate
app instances (and tests) never share counters.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

CallNext = Callable[[Request], Awaitable[Response]]


class Telemetry:
    """Request counters and latency histogram for the gateway."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "route", "status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "route"],
            registry=self.registry,
        )
        self.rate_limit_denied = Counter(
            "rate_limit_denied_total",
            "Requests rejected with 429 by the rate limiter",
            registry=self.registry,
        )

    def observe(self, method: str, route: str, status_code: int, duration_s: float) -> None:
        self.requests_total.labels(method=method, route=route, status=str(status_code)).inc()
        self.request_duration.labels(method=method, route=route).observe(duration_s)

    def render(self) -> bytes:
        """Text exposition of every metric in this instance's registry."""
        return generate_latest(self.registry)


def _route_template(request: Request) -> str:
    # Route is only resolved once the router has run; unmatched paths and
    # requests rejected before routing are grouped together.
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def build_metrics_middleware(telemetry: Telemetry) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """HTTP middleware recording method, route template, status and latency."""

    async def metrics_middleware(request: Request, call_next: CallNext) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        telemetry.observe(
            request.method,
            _route_template(request),
            response.status_code,
            time.perf_counter() - start,
        )
        return response

    return metrics_middleware
