"""API router for the items feature.

Three listings over the same table:
    GET /items         offset pages, AND/OR filters
    GET /items/repo    offset pages, flat filters (``|`` alternatives rejected)
    GET /items/cursor  keyset pages (``cursor``/``direction``), no counts
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from listing_service.core.dependencies import DbSession, get_pagination_params, sort_and_filter
from listing_service.core.pagination import PaginatedResult, PaginateParams
from listing_service.core.query import SortAndFilterParams
from listing_service.features.items.repository import (
    FILTERABLE_FIELDS,
    SORTABLE_FIELDS,
    ItemRepository,
    get_item_repository,
)
from listing_service.features.items.schemas import ItemRead
from listing_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/items", tags=["items"])

lazy_logger = get_lazy_logger(__name__)

ItemRepo = Annotated[ItemRepository, Depends(get_item_repository)]
ItemPagination = Annotated[PaginateParams, Depends(get_pagination_params(max_page_size=100))]
ItemQuery = Annotated[
    SortAndFilterParams,
    Depends(sort_and_filter(sortable=SORTABLE_FIELDS, filterable=FILTERABLE_FIELDS)),
]


@router.get(
    "",
    response_model=PaginatedResult[ItemRead],
    summary="List items",
    description="""
Offset-paginated item listing.

**Query parameters:**
- `page`, `pageSize`: 1-based page and page size
- `sort`: e.g. `-created_at,name`
- `filter`: e.g. `name__startswith:find,owner.name:alice|carol`
""",
)
async def list_items(
    session: DbSession,
    repo: ItemRepo,
    params: ItemPagination,
    query: ItemQuery,
) -> PaginatedResult[ItemRead]:
    page = await repo.paginate(session, params, query)
    return page.map(ItemRead.model_validate)


@router.get(
    "/repo",
    response_model=PaginatedResult[ItemRead],
    summary="List items (flat filters)",
    description="Same as `GET /items` but filters are applied as a flat field map; "
    "a `|` alternative in any filter is rejected with 400.",
)
async def list_items_flat(
    session: DbSession,
    repo: ItemRepo,
    params: ItemPagination,
    query: ItemQuery,
) -> PaginatedResult[ItemRead]:
    page = await repo.paginate_flat(session, params, query)
    return page.map(ItemRead.model_validate)


@router.get(
    "/cursor",
    response_model=PaginatedResult[ItemRead],
    summary="List items with cursor pagination",
    description="""
Keyset-paginated item listing; `meta` is always null.

**Usage:**
1. First page: `GET /items/cursor?pageSize=10`
2. Follow `links.next` / `links.prev` unchanged
3. `links.last` starts from the end of the listing
""",
)
async def list_items_cursor(
    session: DbSession,
    repo: ItemRepo,
    params: ItemPagination,
    query: ItemQuery,
) -> PaginatedResult[ItemRead]:
    page = await repo.paginate_keyset(session, params, query)
    lazy_logger.debug(lambda: f"items.cursor: {len(page.results)} items, next={page.links.next}")
    return page.map(ItemRead.model_validate)


__all__ = ["router"]
