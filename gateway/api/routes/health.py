from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse


def health_check() -> PlainTextResponse:
    """Health check endpoint.

    Returns a plain ``OK`` to verify the gateway is operational.
    Used by load balancers and monitoring systems to determine service health.
    """

    return PlainTextResponse("OK")


def create_health_router(path: str = "/health") -> APIRouter:
    router = APIRouter(tags=["Health"])
    router.add_api_route(path, health_check, methods=["GET"], response_class=PlainTextResponse)
    return router
