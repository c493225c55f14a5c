"""Repository for the items feature."""

from __future__ import annotations

from listing_service.core.database import BaseRepository
from listing_service.features.items.models import Item

# Fields exposed to the ``sort`` and ``filter`` query parameters
SORTABLE_FIELDS = ("name", "email", "created_at", "owner.name")
FILTERABLE_FIELDS = ("name", "email", "created_at", "owner.name")


class ItemRepository(BaseRepository[Item]):
    """Item listings; ``owner`` is eager-loaded by its relationship."""

    def __init__(self) -> None:
        """Initialize with Item model."""
        super().__init__(Item)


_item_repository: ItemRepository | None = None


def get_item_repository() -> ItemRepository:
    """Get the shared ItemRepository instance (FastAPI dependency)."""
    global _item_repository
    if _item_repository is None:
        _item_repository = ItemRepository()
    return _item_repository


__all__ = [
    "FILTERABLE_FIELDS",
    "SORTABLE_FIELDS",
    "ItemRepository",
    "get_item_repository",
]
