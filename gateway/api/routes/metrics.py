from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from gateway.api.deps import get_telemetry
from gateway.core.telemetry import Telemetry


def metrics(telemetry: Annotated[Telemetry, Depends(get_telemetry)]) -> Response:
    """Prometheus text exposition of the gateway's metrics."""

    return Response(content=telemetry.render(), media_type=telemetry.content_type)


def create_metrics_router(path: str = "/metrics") -> APIRouter:
    router = APIRouter(tags=["Metrics"])
    router.add_api_route(path, metrics, methods=["GET"], include_in_schema=False)
    return router
