"""Pydantic schemas for the items feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ItemOwnerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ItemRead(BaseModel):
    """Representation returned from the list endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(..., max_length=200)
    email: str
    created_at: datetime
    owner: ItemOwnerRead | None = None


__all__ = ["ItemOwnerRead", "ItemRead"]
