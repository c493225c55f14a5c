"""Page-number pagination with count-derived metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from listing_service.core.exceptions import ValidationException
from listing_service.core.pagination.links import LinkBuilder
from listing_service.core.pagination.schemas import PageLinks, PageMeta, PaginatedResult
from listing_service.core.query import ResolvedOrdering
from listing_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from listing_service.core.database.source import DataSource
    from listing_service.core.pagination.params import PaginateParams
    from listing_service.core.query import Predicate
    from listing_service.core.settings import PaginationSettings

lazy_logger = get_lazy_logger(__name__)


def page_count(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` records (0 when there are none)."""
    if count == 0:
        return 0
    return (count - 1) // page_size + 1


class OffsetPaginator:
    """Skip/take pagination.

    Args:
        params: Page, page size and link context for the request.
        settings: Pagination settings (parameter names for links).
    """

    def __init__(self, params: PaginateParams, settings: PaginationSettings | None = None) -> None:
        self.params = params
        self.settings = settings

    def validate(self) -> None:
        if self.params.page_size <= 0:
            raise ValidationException(
                detail="pageSize must be a positive integer",
                extra={"page_size": self.params.page_size},
            )
        if self.params.page < 1:
            raise ValidationException(
                detail="page must be >= 1",
                extra={"page": self.params.page},
            )

    async def paginate(
        self,
        source: DataSource[Any],
        ordering: ResolvedOrdering | None = None,
        predicate: Predicate | None = None,
    ) -> PaginatedResult[Any]:
        self.validate()
        page, page_size = self.params.page, self.params.page_size

        count = await source.count(predicate)
        rows = await source.fetch(
            ordering or ResolvedOrdering(),
            predicate,
            limit=page_size,
            offset=self.params.skip,
        )
        pages = page_count(count, page_size)

        links = LinkBuilder.for_params(self.params, self.settings)
        result = PaginatedResult[Any](
            results=rows,
            meta=PageMeta(page_count=pages, page_size=page_size, page=page, count=count),
            links=PageLinks(
                first=links.build(page=1, page_size=page_size),
                prev=links.build(page=page - 1, page_size=page_size) if page > 1 else None,
                next=links.build(page=page + 1, page_size=page_size) if page < pages else None,
                last=links.build(page=max(pages, 1), page_size=page_size),
            ),
        )
        lazy_logger.debug(
            lambda: f"offset.paginate: page {page}/{pages} size={page_size} "
            f"-> {len(rows)}/{count} rows"
        )
        return result


__all__ = ["OffsetPaginator", "page_count"]
