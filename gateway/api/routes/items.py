"""Item CRUD endpoints under ``/api/{version}``."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from gateway.api.deps import get_item_store
from gateway.core.config import ApiSettings
from gateway.schemas.items import Item
from gateway.services.item_store import ItemStore


def list_items(store: Annotated[ItemStore, Depends(get_item_store)]) -> list[Item]:
    """Return every stored item in insertion order."""

    return store.list_items()


def create_item(
    item: Item,
    store: Annotated[ItemStore, Depends(get_item_store)],
) -> Item:
    """Store a new item and echo it back.

    Raises:
        ValidationAppError: 400 when the id or name is blank.
    """

    return store.add(item)


def create_items_router(api: ApiSettings) -> APIRouter:
    """Build the versioned item router with paths taken from settings."""

    router = APIRouter(prefix=f"/api/{api.version}", tags=["Items"])
    router.add_api_route(
        api.route("get_items"),
        list_items,
        methods=["GET"],
        response_model=list[Item],
    )
    router.add_api_route(
        api.route("create_item"),
        create_item,
        methods=["POST"],
        response_model=Item,
    )
    return router
