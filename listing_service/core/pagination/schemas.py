"""Response envelope for paginated list endpoints.

Wire format (camelCase)::

    {
      "results": [...],
      "meta": {"pageCount": 5, "pageSize": 2, "page": 2, "count": 9},
      "links": {"first": "...", "next": "...", "prev": "...", "last": "..."}
    }

``meta`` is only populated in offset mode; keyset pages report ``null``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")
U = TypeVar("U")


class PageMeta(BaseModel):
    """Offset-mode page metadata.

    Attributes:
        page_count: Number of pages (0 for an empty listing).
        page_size: Records per page.
        page: Current 1-based page.
        count: Total matching records.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    page_count: int = Field(ge=0)
    page_size: int = Field(ge=1)
    page: int = Field(ge=1)
    count: int = Field(ge=0)


class PageLinks(BaseModel):
    """Navigation URLs; a missing direction is ``None``."""

    model_config = ConfigDict(frozen=True)

    first: str | None = None
    next: str | None = None
    prev: str | None = None
    last: str | None = None


class PaginatedResult(BaseModel, Generic[T]):
    """One page of results in forward order plus navigation.

    Example:
        page = await repo.paginate(session, params, sort_and_filter)
        return page.map(ItemRead.model_validate)
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    results: list[T] = Field(default_factory=list)
    meta: PageMeta | None = None
    links: PageLinks = Field(default_factory=PageLinks)

    def map(self, fn: Callable[[T], U]) -> PaginatedResult[U]:
        """Return the same page with every result passed through ``fn``."""
        return PaginatedResult[Any](
            results=[fn(item) for item in self.results],
            meta=self.meta,
            links=self.links,
        )


__all__ = ["PageLinks", "PageMeta", "PaginatedResult"]
