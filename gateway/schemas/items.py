"""Pydantic schemas for the item API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Item(BaseModel):
    """A stored item."""

    id: str = Field(..., description="Caller-assigned item identifier.")
    name: str = Field(..., description="Display name of the item.")
