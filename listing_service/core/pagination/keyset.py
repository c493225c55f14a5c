"""Keyset (cursor) pagination.

A page is the window of ``page_size`` rows that sort strictly after (or
before) an anchor row under the request ordering. The anchor is either the
row named by the cursor or a synthetic boundary: the first row for a plain
forward request, the last row for a plain backward request.

The ordering always ends in the identifier column, so every row has a
distinct key tuple and a seek predicate of the form::

    (c1 > v1)
    OR (c1 = v1 AND c2 > v2)
    OR (c1 = v1 AND c2 = v2 AND id > v_id)

selects exactly the rows after the anchor. ``>`` flips to ``<`` for
descending columns and for backward traversal (the ordering is reversed as
a whole, then the fetched rows are reversed back). Against a synthetic
anchor the final comparison is inclusive, so the boundary row itself is
part of the first/last page.

NULL counts as the smallest value of a column. Ordering clauses pin it
there (NULLS FIRST ascending, NULLS LAST descending) and the seek branch of
a nullable column swaps ``> NULL`` for ``IS NOT NULL`` and widens ``< v`` to
``< v OR IS NULL``.

No count query is issued. Rows keep their position across pages as long as
their ordering columns do not change between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from listing_service.core.exceptions import ValidationException
from listing_service.core.pagination.cursor import CursorCodec
from listing_service.core.pagination.links import LinkBuilder
from listing_service.core.pagination.params import Traversal
from listing_service.core.pagination.schemas import PageLinks, PaginatedResult
from listing_service.core.query import (
    AllOf,
    AnyOf,
    Comparison,
    Direction,
    Operator,
    OrderTerm,
    ResolvedOrdering,
    all_of,
)
from listing_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from listing_service.core.database.source import DataSource
    from listing_service.core.pagination.params import PaginateParams
    from listing_service.core.query import Predicate
    from listing_service.core.settings import PaginationSettings

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

# Extra rows fetched beyond page_size to detect more data
FORWARD_OVERFETCH = 1
BACKWARD_OVERFETCH = 2


@dataclass(slots=True)
class KeysetWindow[T]:
    """Rows of one keyset page (forward order) and whether neighbours exist."""

    rows: list[T] = field(default_factory=list)
    has_next: bool = False
    has_prev: bool = False


def _after(term: OrderTerm, value: Any, operator: Operator) -> Predicate | None:
    """Rows whose ``term`` column sorts after ``value``; None when none can.

    NULL sorts below every value, so it comes first ascending and last
    descending.
    """
    if term.direction is Direction.ASC:
        if value is None:
            return Comparison(term.ref, Operator.NEQ, None)
        return Comparison(term.ref, operator, value)
    if value is None:
        return None
    return AnyOf((Comparison(term.ref, operator, value), Comparison(term.ref, Operator.EQ, None)))


def seek_predicate(
    ordering: ResolvedOrdering,
    anchor: Sequence[Any],
    *,
    inclusive: bool = False,
) -> Predicate:
    """Rows that sort after ``anchor`` under ``ordering``.

    Leading terms may hold NULL anchor values; equality against NULL
    renders as ``IS NULL``. The final term is the identifier and must not.

    Args:
        ordering: Traversal ordering (already reversed for backward moves).
        anchor: Anchor key tuple, one value per ordering term.
        inclusive: Also match the anchor row itself (synthetic anchors).

    Raises:
        ValueError: If ``anchor`` does not match ``ordering`` or its final
            value is None.
    """
    terms = ordering.terms
    if len(anchor) != len(terms):
        raise ValueError(f"anchor has {len(anchor)} values for {len(terms)} ordering terms")
    if anchor and anchor[-1] is None:
        raise ValueError("anchor ends in a NULL identifier")

    branches: list[Predicate] = []
    last = len(terms) - 1
    for index, term in enumerate(terms):
        if term.direction is Direction.ASC:
            operator = Operator.GTE if inclusive and index == last else Operator.GT
        else:
            operator = Operator.LTE if inclusive and index == last else Operator.LT

        comparison = _after(term, anchor[index], operator)
        if comparison is None:
            continue
        prefix = [
            Comparison(prior.ref, Operator.EQ, value)
            for prior, value in zip(terms[:index], anchor, strict=False)
        ]
        branches.append(AllOf((*prefix, comparison)) if prefix else comparison)

    return branches[0] if len(branches) == 1 else AnyOf(tuple(branches))


class KeysetPaginator:
    """Cursor pagination over a ``DataSource``.

    Args:
        params: Page size, cursor, direction and link context.
        settings: Pagination settings (parameter names for links).

    Example:
        paginator = KeysetPaginator(params)
        page = await paginator.paginate(source, ordering, predicate)
        page.links.next  # '...?pageSize=10&cursor=eyJpZCI6MTB9&direction=forward'
    """

    def __init__(self, params: PaginateParams, settings: PaginationSettings | None = None) -> None:
        self.params = params
        self.settings = settings

    @property
    def backward(self) -> bool:
        return self.params.direction is Traversal.BACKWARD

    async def fetch_window(
        self,
        source: DataSource[Any],
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
    ) -> KeysetWindow[Any]:
        """Fetch the rows of the requested page.

        Raises:
            ValidationException: If ``page_size`` is not positive.
        """
        page_size = self.params.page_size
        if page_size <= 0:
            raise ValidationException(
                detail="pageSize must be a positive integer",
                extra={"page_size": page_size},
            )

        ordering = ordering.with_tiebreaker(source.identity)
        traversal = ordering.reversed() if self.backward else ordering
        explicit = self.params.cursor is not None

        anchor = await self._anchor(source, ordering, traversal, predicate)
        if anchor is None:
            return KeysetWindow()

        seek = seek_predicate(traversal, anchor, inclusive=not explicit)
        overfetch = BACKWARD_OVERFETCH if self.backward else FORWARD_OVERFETCH
        rows = await source.fetch(traversal, all_of(predicate, seek), limit=page_size + overfetch)

        has_more = len(rows) > page_size
        rows = rows[:page_size]
        if self.backward:
            rows.reverse()
            window = KeysetWindow(rows, has_next=explicit, has_prev=has_more)
        else:
            window = KeysetWindow(rows, has_next=has_more, has_prev=explicit)

        lazy_logger.debug(
            lambda: f"keyset.window: {self.params.direction} size={page_size} "
            f"rows={[source.identify(row) for row in window.rows]} "
            f"has_next={window.has_next} has_prev={window.has_prev}"
        )
        return window

    async def paginate(
        self,
        source: DataSource[Any],
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
    ) -> PaginatedResult[Any]:
        window = await self.fetch_window(source, ordering, predicate)
        page_size = self.params.page_size
        links = LinkBuilder.for_params(self.params, self.settings)

        next_link = prev_link = None
        if window.rows and window.has_next:
            next_link = links.build(
                page_size=page_size,
                cursor=CursorCodec.create_cursor(window.rows[-1], source.identity),
                direction=Traversal.FORWARD.value,
            )
        if window.rows and window.has_prev:
            prev_link = links.build(
                page_size=page_size,
                cursor=CursorCodec.create_cursor(window.rows[0], source.identity),
                direction=Traversal.BACKWARD.value,
            )

        return PaginatedResult[Any](
            results=window.rows,
            meta=None,
            links=PageLinks(
                first=links.build(page_size=page_size),
                next=next_link,
                prev=prev_link,
                last=links.build(page_size=page_size, direction=Traversal.BACKWARD.value),
            ),
        )

    async def _anchor(
        self,
        source: DataSource[Any],
        ordering: ResolvedOrdering,
        traversal: ResolvedOrdering,
        predicate: Predicate | None,
    ) -> tuple[Any, ...] | None:
        cursor = self.params.cursor
        if cursor is None:
            # Synthetic first (forward) or last (backward) row
            return await source.probe(traversal, predicate)

        try:
            identifier = CursorCodec.decode(cursor)
        except ValueError:
            logger.info("Ignoring undecodable cursor", extra={"cursor": cursor})
            return None

        anchor = await source.probe(ordering, identifier=identifier)
        if anchor is None:
            logger.info("Cursor no longer resolves to a record", extra={"identifier": identifier})
        return anchor


__all__ = [
    "BACKWARD_OVERFETCH",
    "FORWARD_OVERFETCH",
    "KeysetPaginator",
    "KeysetWindow",
    "seek_predicate",
]
