from __future__ import annotations

from gateway.api.routes.health import create_health_router
from gateway.api.routes.items import create_items_router
from gateway.api.routes.metrics import create_metrics_router

__all__ = ["create_health_router", "create_items_router", "create_metrics_router"]
