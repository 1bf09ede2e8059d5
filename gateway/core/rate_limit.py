"""Rate limiting middleware for the request pipeline.

This module wires the client tracker adapter into the HTTP layer.

Rate limiting strategy:
- Fixed-window limit per client identity, applied globally ahead of every
  route (health and metrics included).
- Identity is the first address in X-Forwarded-For when present, otherwise
  the directly connected peer's host.
- Installed only when enabled in settings; with rate limiting disabled the
  pipeline contains no limiter at all.
"""

from __future__ import annotations

import ipaddress
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse

from gateway.adapters.rate_limit.base import AbstractClientTracker, AdmissionResult
from gateway.adapters.rate_limit.in_memory import ClientTracker
from gateway.core.config import RateLimitSettings
from gateway.core.telemetry import Telemetry

logger = logging.getLogger(__name__)

FORWARDED_FOR_HEADER = "X-Forwarded-For"
REJECTION_BODY = "Rate limit exceeded"

CallNext = Callable[[Request], Awaitable[Response]]
HttpMiddleware = Callable[[Request, CallNext], Awaitable[Response]]


def build_client_tracker(rate_limit: RateLimitSettings) -> ClientTracker:
    """Create the process-wide tracker from settings.

    Raises:
        ConfigurationAppError: If the window cannot be parsed or either limit
            is not positive.
    """

    return ClientTracker(rate_limit.max_requests, rate_limit.window)


def split_host_port(address: str) -> str:
    """Return the host portion of a ``host:port`` address.

    IPv6 hosts must be bracketed (``[::1]:8080``). Anything that is not a
    well-formed ``host:port`` pair yields an empty string, so such clients
    all share a single bucket instead of failing the request.

    Examples:
        >>> split_host_port("9.9.9.9:54321")
        '9.9.9.9'
        >>> split_host_port("[::1]:8080")
        '::1'
        >>> split_host_port("garbage")
        ''
    """

    if address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1:end + 2] != ":":
            return ""
        return address[1:end]

    host, sep, port = address.rpartition(":")
    if not sep or ":" in host or "[" in port or "]" in port:
        return ""
    return host


def format_peer_address(host: str | None, port: int | None) -> str:
    """Render a peer as ``host:port``, bracketing IPv6 literals."""

    if not host:
        return ""
    try:
        if ipaddress.ip_address(host).version == 6:
            host = f"[{host}]"
    except ValueError:
        pass
    return f"{host}:{port if port is not None else ''}"


def peer_address_from_request(request: Request) -> str:
    """Directly connected peer address as reported by the ASGI server."""

    if request.client is None:
        return ""
    return format_peer_address(request.client.host, request.client.port)


def resolve_client_identity(forwarded_for: str | None, peer_address: str) -> str:
    """Resolve the identity used to bucket a request.

    Args:
        forwarded_for: Raw X-Forwarded-For header value, if any.
        peer_address: Directly connected peer as ``host:port``.

    Returns:
        The first comma-separated X-Forwarded-For entry (whitespace trimmed)
        when the header carries one, otherwise the peer host.

    Examples:
        >>> resolve_client_identity("1.2.3.4, 5.6.7.8", "10.0.0.1:443")
        '1.2.3.4'
        >>> resolve_client_identity(None, "9.9.9.9:54321")
        '9.9.9.9'
    """

    if forwarded_for:
        first = forwarded_for.split(",", 1)[0].strip()
        if first:
            return first
    return split_host_port(peer_address)


def client_identity(request: Request) -> str:
    return resolve_client_identity(
        request.headers.get(FORWARDED_FOR_HEADER),
        peer_address_from_request(request),
    )


def _log_decision(identity: str, path: str, result: AdmissionResult) -> None:
    fields = {
        "client_identity": identity,
        "request_count": result.count,
        "request_limit": result.limit,
        "window_end": datetime.fromtimestamp(result.window_end, tz=timezone.utc).isoformat(),
        "path": path,
    }
    if not result.allowed:
        logger.info(
            "rate_limit.client_denied",
            extra={**fields, "retry_after_s": result.retry_after_seconds},
        )
    elif result.reset:
        logger.debug("rate_limit.client_reset", extra=fields)
    else:
        logger.debug("rate_limit.client_allowed", extra=fields)


def build_rate_limit_middleware(
    tracker: AbstractClientTracker,
    *,
    include_headers: bool = True,
    telemetry: Telemetry | None = None,
) -> HttpMiddleware:
    """Wrap the downstream pipeline with per-client admission control.

    Denied requests get ``429 Rate limit exceeded`` (plain text) and never
    reach the downstream handler. Admitted requests pass through unchanged.

    Args:
        tracker: Shared tracker holding all per-client counters.
        include_headers: Add ``Retry-After`` to rejections.
        telemetry: Optional metrics sink counting denials.

    Returns:
        An ``async (request, call_next)`` HTTP middleware, installable with
        ``app.middleware("http")(...)``.
    """

    async def rate_limit_middleware(request: Request, call_next: CallNext) -> Response:
        identity = client_identity(request)
        result = tracker.consume(identity)
        _log_decision(identity, request.url.path, result)

        if not result.allowed:
            if telemetry is not None:
                telemetry.rate_limit_denied.inc()
            headers: dict[str, str] = {}
            if include_headers and result.retry_after_seconds is not None:
                headers["Retry-After"] = str(result.retry_after_seconds)
            return PlainTextResponse(
                REJECTION_BODY,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers or None,
            )

        return await call_next(request)

    return rate_limit_middleware
