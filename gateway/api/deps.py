"""FastAPI dependencies resolving collaborators stored on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from gateway.core.telemetry import Telemetry
from gateway.services.item_store import ItemStore


def get_item_store(request: Request) -> ItemStore:
    return request.app.state.item_store


def get_telemetry(request: Request) -> Telemetry:
    return request.app.state.telemetry
