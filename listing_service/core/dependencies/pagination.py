"""Pagination dependency for FastAPI routes.

Reads ``page``, ``pageSize``, ``cursor`` and ``direction`` (names from
``PaginationSettings``) the lenient way: a missing or unparsable ``page``
means page 1, a missing, zero or unparsable ``pageSize`` means the default
size, and the size is capped at the route's maximum. Negative numbers are
passed through so the paginator can reject them.

Usage:
    from listing_service.core.dependencies import get_pagination_params

    @router.get("/items")
    async def list_items(
        params: Annotated[PaginateParams, Depends(get_pagination_params(max_page_size=50))],
    ) -> PaginatedResult[ItemRead]:
        ...
"""

from __future__ import annotations

import re
from collections.abc import Callable

from fastapi import Request

from listing_service.core.pagination import PaginateParams, Traversal
from listing_service.core.settings import get_pagination_settings

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(raw: str | None) -> int | None:
    """Leading-integer parse: ``"12abc"`` -> 12, ``"abc"`` -> None."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def get_pagination_params(
    *,
    max_page_size: int | None = None,
    default_page_size: int | None = None,
) -> Callable[[Request], PaginateParams]:
    """Build a dependency that extracts ``PaginateParams`` from the request.

    Args:
        max_page_size: Per-route cap; defaults to ``PAGINATION_MAX_PAGE_SIZE``.
        default_page_size: Per-route default; defaults to
            ``PAGINATION_DEFAULT_PAGE_SIZE``.
    """

    def dependency(request: Request) -> PaginateParams:
        settings = get_pagination_settings()
        query = request.query_params

        page = parse_int(query.get(settings.page_param)) or 1
        page_size = (
            parse_int(query.get(settings.page_size_param))
            or default_page_size
            or settings.default_page_size
        )
        page_size = min(page_size, max_page_size or settings.max_page_size)

        direction = (
            Traversal.BACKWARD
            if query.get(settings.direction_param) == Traversal.BACKWARD.value
            else Traversal.FORWARD
        )

        return PaginateParams(
            page=page,
            page_size=page_size,
            base_url=str(request.url.replace(query="", fragment="")),
            query=tuple(query.multi_items()),
            cursor=query.get(settings.cursor_param) or None,
            direction=direction,
        )

    return dependency


__all__ = ["get_pagination_params", "parse_int"]
