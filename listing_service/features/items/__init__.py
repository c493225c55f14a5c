"""Items feature package: a demo resource for the list endpoints."""

from .repository import ItemRepository, get_item_repository
from .router import router

__all__ = [
    "ItemRepository",
    "get_item_repository",
    "router",
]
