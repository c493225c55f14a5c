"""Sort/filter dependency for FastAPI routes."""

from __future__ import annotations

from collections.abc import Callable, Collection

from fastapi import Request

from listing_service.core.query import QueryContext, SortAndFilterParams, parse_sort_and_filter


def sort_and_filter(
    sortable: Collection[str] | None = None,
    filterable: Collection[str] | None = None,
) -> Callable[[Request], SortAndFilterParams]:
    """Build a dependency parsing ``sort`` and ``filter`` against allow-lists.

    Example:
        @router.get("/items")
        async def list_items(
            query: Annotated[
                SortAndFilterParams,
                Depends(sort_and_filter(sortable=["name"], filterable=["name", "owner.name"])),
            ],
        ): ...
    """
    sortable = frozenset(sortable) if sortable is not None else None
    filterable = frozenset(filterable) if filterable is not None else None

    def dependency(request: Request) -> SortAndFilterParams:
        context = QueryContext(params=dict(request.query_params))
        return parse_sort_and_filter(context, sortable, filterable)

    return dependency


__all__ = ["sort_and_filter"]
