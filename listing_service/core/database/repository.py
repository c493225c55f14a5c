"""Generic repository exposing list pagination for SQLAlchemy models.

Session passing stays explicit; the repository only wires request
parameters through the predicate builder, a data source and a paginator.

Example:
    from listing_service.core.database import BaseRepository

    class ItemRepository(BaseRepository[Item]):
        def base_statement(self):
            return select(Item).options(selectinload(Item.owner))

    repo = ItemRepository(Item)
    page = await repo.paginate(session, params, sort_and_filter)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from listing_service.core.database.source import SqlAlchemySource
from listing_service.core.pagination import KeysetPaginator, OffsetPaginator
from listing_service.core.query import PredicateBuilder, SortAndFilterParams
from listing_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from listing_service.core.pagination import PaginatedResult, PaginateParams
    from listing_service.core.query import JoinRegistry
    from listing_service.core.settings import PaginationSettings


class BaseRepository[T]:
    """List operations for one model.

    Provides:
        - paginate(session, params, query) -> offset page, composable filters
        - paginate_flat(session, params, query) -> offset page, flat filters
        - paginate_keyset(session, params, query) -> cursor page

    ``query`` defaults to no sorting and no filtering.
    """

    __slots__ = ("model", "_lazy")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., Item)
        """
        self.model = model
        self._lazy = get_lazy_logger(f"repository.{model.__name__}")

    def base_statement(self) -> Select[tuple[T]]:
        """Statement every listing starts from; override to add loader options."""
        return select(self.model)

    def source(
        self,
        session: AsyncSession,
        *,
        joins: JoinRegistry | None = None,
    ) -> SqlAlchemySource[T]:
        return SqlAlchemySource(session, self.model, statement=self.base_statement(), joins=joins)

    async def paginate(
        self,
        session: AsyncSession,
        params: PaginateParams,
        query: SortAndFilterParams | None = None,
        *,
        settings: PaginationSettings | None = None,
    ) -> PaginatedResult[Any]:
        """Offset page with sorting and composable (AND/OR) filtering."""
        query = query or SortAndFilterParams()
        builder = PredicateBuilder()
        ordering = builder.build_ordering(query.sort)
        predicate = builder.build_filter_predicate(query.filter)

        page = await OffsetPaginator(params, settings).paginate(
            self.source(session, joins=builder.joins), ordering, predicate
        )
        self._lazy.debug(
            lambda: f"db.paginate: {self.model.__name__}(page={params.page}, "
            f"size={params.page_size}, joins={builder.joins.as_dict()}) -> {len(page.results)} items"
        )
        return page

    async def paginate_flat(
        self,
        session: AsyncSession,
        params: PaginateParams,
        query: SortAndFilterParams | None = None,
        *,
        settings: PaginationSettings | None = None,
    ) -> PaginatedResult[Any]:
        """Offset page with flat ``field -> condition`` filtering.

        Raises:
            UnsupportedOperationException: If a filter uses ``|`` alternatives.
        """
        query = query or SortAndFilterParams()
        builder = PredicateBuilder()
        conditions = builder.build_flat_filter(query.filter)
        ordering = builder.build_ordering(query.sort)

        source = self.source(session, joins=builder.joins).filter_flat(conditions)
        page = await OffsetPaginator(params, settings).paginate(source, ordering)
        self._lazy.debug(
            lambda: f"db.paginate_flat: {self.model.__name__}(page={params.page}, "
            f"conditions={sorted(conditions)}) -> {len(page.results)} items"
        )
        return page

    async def paginate_keyset(
        self,
        session: AsyncSession,
        params: PaginateParams,
        query: SortAndFilterParams | None = None,
        *,
        settings: PaginationSettings | None = None,
    ) -> PaginatedResult[Any]:
        """Cursor page; the identifier is appended to the ordering as tiebreaker."""
        query = query or SortAndFilterParams()
        builder = PredicateBuilder()
        ordering = builder.build_ordering(query.sort)
        predicate = builder.build_filter_predicate(query.filter)

        page = await KeysetPaginator(params, settings).paginate(
            self.source(session, joins=builder.joins), ordering, predicate
        )
        self._lazy.debug(
            lambda: f"db.paginate_keyset: {self.model.__name__}(cursor={params.cursor!r}, "
            f"direction={params.direction}) -> {len(page.results)} items"
        )
        return page


__all__ = ["BaseRepository"]
