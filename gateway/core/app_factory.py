"""Application factory for the gateway.

Centralizes app construction (state, middleware, handlers, routers) so tests
can build isolated instances with their own settings and collaborators.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from gateway.adapters.rate_limit.base import AbstractClientTracker
from gateway.api.routes import create_health_router, create_items_router, create_metrics_router
from gateway.core.config import Settings, settings as default_settings
from gateway.core.exception_handlers import setup_exception_handlers
from gateway.core.middleware import build_request_id_middleware
from gateway.core.rate_limit import build_client_tracker, build_rate_limit_middleware
from gateway.core.telemetry import Telemetry, build_metrics_middleware
from gateway.services.item_store import ItemStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    item_store: ItemStore | None = None,
    tracker: AbstractClientTracker | None = None,
    telemetry: Telemetry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Resolved settings; defaults to the environment-loaded ones.
        item_store: Store backing the item routes (seeded default if omitted).
        tracker: Client tracker to use when rate limiting is enabled; built
            from settings if omitted.
        telemetry: Metrics sink; a fresh one is created if omitted.

    Returns:
        Configured app with middleware, handlers and routers.

    Raises:
        ConfigurationAppError: If rate limiting is enabled with an invalid
            configuration. Nothing is served in that case.
    """
    cfg = settings or default_settings
    rate_limit = cfg.rate_limit

    # Validate the limiter before anything else so a bad config never yields
    # a partially assembled app.
    if rate_limit.enabled and tracker is None:
        tracker = build_client_tracker(rate_limit)

    app = FastAPI(
        title="API Gateway",
        description="HTTP API gateway with per-client fixed-window rate limiting.",
        version="0.1.0",
    )
    app.state.settings = cfg
    app.state.item_store = item_store if item_store is not None else ItemStore()
    app.state.telemetry = telemetry if telemetry is not None else Telemetry()
    app.state.client_tracker = tracker if rate_limit.enabled else None

    setup_exception_handlers(app)

    # Routers
    app.include_router(create_health_router(cfg.api.route("health")))
    app.include_router(create_items_router(cfg.api))
    if cfg.telemetry.enabled and cfg.telemetry.metrics_endpoint:
        app.include_router(create_metrics_router(cfg.telemetry.metrics_endpoint))
        logger.info(
            "telemetry.metrics_endpoint",
            extra={"path": cfg.telemetry.metrics_endpoint},
        )

    # Middleware: the last one added runs first, so the limiter sits right
    # in front of the routes and every request, rejected or not, is measured
    # and carries a request id.
    if rate_limit.enabled:
        app.middleware("http")(
            build_rate_limit_middleware(
                app.state.client_tracker,
                include_headers=rate_limit.include_headers,
                telemetry=app.state.telemetry if cfg.telemetry.enabled else None,
            )
        )
        logger.info(
            "rate_limit.enabled",
            extra={
                "max_requests": rate_limit.max_requests,
                "time_window": rate_limit.time_window,
            },
        )
    if cfg.telemetry.enabled:
        app.middleware("http")(build_metrics_middleware(app.state.telemetry))
    app.middleware("http")(build_request_id_middleware(cfg.log.request_id_header))

    return app
