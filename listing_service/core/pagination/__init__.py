"""Offset and keyset pagination.

Offset mode (``page``/``pageSize``) reports counts; keyset mode
(``cursor``/``direction``/``pageSize``) walks an ordering without them.

Example:
    from listing_service.core.pagination import KeysetPaginator, PaginateParams

    params = PaginateParams(page_size=10, base_url="http://api/items")
    page = await KeysetPaginator(params).paginate(source, ordering, predicate)
"""

from listing_service.core.pagination.cursor import CursorCodec
from listing_service.core.pagination.keyset import (
    BACKWARD_OVERFETCH,
    FORWARD_OVERFETCH,
    KeysetPaginator,
    KeysetWindow,
    seek_predicate,
)
from listing_service.core.pagination.links import LinkBuilder
from listing_service.core.pagination.offset import OffsetPaginator, page_count
from listing_service.core.pagination.params import PaginateParams, Traversal
from listing_service.core.pagination.schemas import PageLinks, PageMeta, PaginatedResult

__all__ = [
    "BACKWARD_OVERFETCH",
    "FORWARD_OVERFETCH",
    "CursorCodec",
    "KeysetPaginator",
    "KeysetWindow",
    "LinkBuilder",
    "OffsetPaginator",
    "PageLinks",
    "PageMeta",
    "PaginateParams",
    "PaginatedResult",
    "Traversal",
    "page_count",
    "seek_predicate",
]
