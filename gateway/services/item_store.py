"""In-memory item store backing the item API.

Thread-safe: sync route handlers run in a worker threadpool, so reads and
writes are serialized with a lock. Contents are lost on restart.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from gateway.core.errors import ValidationAppError
from gateway.schemas.items import Item

logger = logging.getLogger(__name__)


DEFAULT_ITEMS: tuple[Item, ...] = (
    Item(id="1", name="Item One"),
    Item(id="2", name="Item Two"),
)


class ItemStore:
    """Ordered collection of items. Duplicate ids are allowed."""

    def __init__(self, items: Iterable[Item] | None = None) -> None:
        seed = DEFAULT_ITEMS if items is None else items
        self._items: list[Item] = [item.model_copy() for item in seed]
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def list_items(self) -> list[Item]:
        """Return a snapshot of all items in insertion order."""
        with self._lock:
            return list(self._items)

    def add(self, item: Item) -> Item:
        """Append an item and return it.

        Raises:
            ValidationAppError: If the id or name is blank.
        """
        for field in ("id", "name"):
            if not getattr(item, field).strip():
                raise ValidationAppError(
                    code="invalid_item",
                    message=f"Item {field} must not be empty",
                    details={"field": field},
                )

        with self._lock:
            self._items.append(item)
            total = len(self._items)

        logger.info("item.created", extra={"item_id": item.id, "item_count": total})
        return item
