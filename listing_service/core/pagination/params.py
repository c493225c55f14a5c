"""Pagination request parameters."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Traversal(StrEnum):
    """Keyset traversal direction relative to the cursor."""

    FORWARD = "forward"
    BACKWARD = "backward"


class PaginateParams(BaseModel):
    """Raw pagination input for one request.

    Values are taken as given; the paginators validate them
    (``page_size <= 0`` and ``page < 1`` are rejected there).

    Attributes:
        page: 1-based page number (offset mode).
        page_size: Records per page.
        base_url: Request URL without query string, used for links.
        query: Every original query parameter as ``(key, value)`` pairs.
        cursor: Opaque keyset cursor, if any.
        direction: Keyset traversal direction.
    """

    model_config = ConfigDict(frozen=True)

    page: int = 1
    page_size: int = 10
    base_url: str = ""
    query: tuple[tuple[str, str], ...] = Field(default=())
    cursor: str | None = None
    direction: Traversal = Traversal.FORWARD

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


__all__ = ["PaginateParams", "Traversal"]
