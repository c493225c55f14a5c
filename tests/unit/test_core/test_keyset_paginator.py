"""Unit tests for keyset pagination over an in-memory data source."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from listing_service.core.exceptions import ValidationException
from listing_service.core.pagination import (
    BACKWARD_OVERFETCH,
    FORWARD_OVERFETCH,
    CursorCodec,
    KeysetPaginator,
    PaginateParams,
    Traversal,
    seek_predicate,
)
from listing_service.core.query import (
    AllOf,
    AnyOf,
    Comparison,
    Direction,
    FieldRef,
    Operator,
    OrderTerm,
    PredicateBuilder,
    ResolvedOrdering,
    parse_filter,
    parse_sort,
)
from listing_service.core.settings import PaginationSettings

# ──────────────────────────────────────────────────────────────
# In-memory data source
# ──────────────────────────────────────────────────────────────


@dataclass
class Row:
    id: int
    name: str
    score: int | None


_OPS = {
    Operator.EQ: lambda a, b: a == b,
    Operator.NEQ: lambda a, b: a != b,
    Operator.GT: lambda a, b: a > b,
    Operator.LT: lambda a, b: a < b,
    Operator.GTE: lambda a, b: a >= b,
    Operator.LTE: lambda a, b: a <= b,
    Operator.STARTSWITH: lambda a, b: a.startswith(b.rstrip("%")),
}


def _null_first(value: Any) -> tuple[bool, Any]:
    return (value is not None, value)


class InMemorySource:
    """DataSource over a list of rows; records every call for inspection."""

    identity = "id"

    def __init__(self, rows: list[Row]) -> None:
        self.rows = rows
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def identify(self, record: Row) -> int:
        return record.id

    def _matches(self, row: Row, predicate: Any) -> bool:
        if predicate is None:
            return True
        if isinstance(predicate, Comparison):
            value = getattr(row, predicate.ref.field)
            if predicate.value is None:
                # SQL equality against NULL is IS NULL / IS NOT NULL
                return (value is None) is (predicate.operator is Operator.EQ)
            if value is None:
                return False
            return _OPS[predicate.operator](value, predicate.value)
        if isinstance(predicate, AllOf):
            return all(self._matches(row, child) for child in predicate.children)
        return any(self._matches(row, child) for child in predicate.children)

    def _select(self, ordering: ResolvedOrdering, predicate: Any) -> list[Row]:
        rows = [row for row in self.rows if self._matches(row, predicate)]
        for term in reversed(ordering.terms):
            rows.sort(
                key=lambda row, term=term: _null_first(getattr(row, term.ref.field)),
                reverse=term.direction is Direction.DESC,
            )
        return rows

    async def fetch(self, ordering, predicate=None, *, limit=None, offset=None):
        self.calls.append(("fetch", {"limit": limit, "predicate": predicate}))
        rows = self._select(ordering, predicate)[offset or 0 :]
        return rows[:limit] if limit is not None else rows

    async def probe(self, ordering, predicate=None, *, identifier=None):
        self.calls.append(("probe", {"identifier": identifier, "predicate": predicate}))
        if identifier is not None:
            rows = [row for row in self.rows if row.id == identifier]
        else:
            rows = self._select(ordering, predicate)
        if not rows:
            return None
        return tuple(getattr(rows[0], term.ref.field) for term in ordering)

    async def count(self, predicate=None):
        self.calls.append(("count", {}))
        return len(self._select(ResolvedOrdering(), predicate))


def make_rows(count: int) -> list[Row]:
    # Scores repeat so that multi-column orderings need the tiebreaker
    return [Row(id=n, name=f"row-{n:02d}", score=n % 3) for n in range(1, count + 1)]


def make_nullable_rows(count: int) -> list[Row]:
    # Every third row has no score
    return [
        Row(id=n, name=f"row-{n:02d}", score=None if n % 3 == 0 else n % 4)
        for n in range(1, count + 1)
    ]


def params(**kwargs: Any) -> PaginateParams:
    kwargs.setdefault("base_url", "http://test/items")
    return PaginateParams(**kwargs)


def ordering_for(sort: str | None) -> ResolvedOrdering:
    return PredicateBuilder().build_ordering(parse_sort(sort))


def expected_order(source: InMemorySource, sort: str | None) -> list[int]:
    full = ordering_for(sort).with_tiebreaker("id")
    return [row.id for row in source._select(full, None)]


async def walk_forward(source, sort: str | None, page_size: int) -> list[list[int]]:
    """Follow next cursors from the first page until has_next is false."""
    pages: list[list[int]] = []
    cursor = None
    while True:
        window = await KeysetPaginator(params(page_size=page_size, cursor=cursor)).fetch_window(
            source, ordering_for(sort)
        )
        pages.append([row.id for row in window.rows])
        if not window.has_next:
            return pages
        cursor = CursorCodec.encode(window.rows[-1].id)


async def walk_backward(source, sort: str | None, page_size: int) -> list[list[int]]:
    """Follow prev cursors from the last page until has_prev is false."""
    pages: list[list[int]] = []
    cursor = None
    while True:
        window = await KeysetPaginator(
            params(page_size=page_size, cursor=cursor, direction=Traversal.BACKWARD)
        ).fetch_window(source, ordering_for(sort))
        pages.append([row.id for row in window.rows])
        if not window.has_prev:
            return pages
        cursor = CursorCodec.encode(window.rows[0].id)


# ──────────────────────────────────────────────────────────────
# Seek predicate
# ──────────────────────────────────────────────────────────────


class TestSeekPredicate:
    """Tests for the lexicographic seek condition."""

    def test_single_column_is_one_comparison(self):
        ordering = ResolvedOrdering((OrderTerm(FieldRef("id")),))

        assert seek_predicate(ordering, (5,)) == Comparison(FieldRef("id"), Operator.GT, 5)

    def test_multi_column_or_of_prefix_equalities(self):
        ordering = ResolvedOrdering(
            (OrderTerm(FieldRef("score"), Direction.DESC), OrderTerm(FieldRef("id")))
        )

        predicate = seek_predicate(ordering, (2, 7))

        assert predicate == AnyOf(
            (
                AnyOf(
                    (
                        Comparison(FieldRef("score"), Operator.LT, 2),
                        Comparison(FieldRef("score"), Operator.EQ, None),
                    )
                ),
                AllOf(
                    (
                        Comparison(FieldRef("score"), Operator.EQ, 2),
                        Comparison(FieldRef("id"), Operator.GT, 7),
                    )
                ),
            )
        )

    def test_inclusive_only_on_final_comparison(self):
        ordering = ResolvedOrdering(
            (OrderTerm(FieldRef("score")), OrderTerm(FieldRef("id"), Direction.DESC))
        )

        predicate = seek_predicate(ordering, (1, 4), inclusive=True)

        assert isinstance(predicate, AnyOf)
        assert predicate.children[0] == Comparison(FieldRef("score"), Operator.GT, 1)
        assert predicate.children[1].children[-1] == Comparison(FieldRef("id"), Operator.LTE, 4)

    def test_anchor_length_must_match(self):
        with pytest.raises(ValueError):
            seek_predicate(ResolvedOrdering((OrderTerm(FieldRef("id")),)), (1, 2))

    def test_null_anchor_ascending_continues_with_non_null(self):
        ordering = ResolvedOrdering((OrderTerm(FieldRef("score")), OrderTerm(FieldRef("id"))))

        predicate = seek_predicate(ordering, (None, 3))

        assert predicate == AnyOf(
            (
                Comparison(FieldRef("score"), Operator.NEQ, None),
                AllOf(
                    (
                        Comparison(FieldRef("score"), Operator.EQ, None),
                        Comparison(FieldRef("id"), Operator.GT, 3),
                    )
                ),
            )
        )

    def test_null_anchor_descending_stays_among_nulls(self):
        """Nothing sorts after NULL descending, so only the tie branch remains."""
        ordering = ResolvedOrdering(
            (OrderTerm(FieldRef("score"), Direction.DESC), OrderTerm(FieldRef("id")))
        )

        predicate = seek_predicate(ordering, (None, 3))

        assert predicate == AllOf(
            (
                Comparison(FieldRef("score"), Operator.EQ, None),
                Comparison(FieldRef("id"), Operator.GT, 3),
            )
        )

    def test_null_identifier_is_rejected(self):
        with pytest.raises(ValueError):
            seek_predicate(ResolvedOrdering((OrderTerm(FieldRef("id")),)), (None,))


# ──────────────────────────────────────────────────────────────
# Window semantics
# ──────────────────────────────────────────────────────────────


class TestKeysetWindow:
    """Tests for the window, flags and edge policies."""

    @pytest.mark.asyncio
    async def test_fifteen_records_in_pages_of_ten(self):
        """First page: 10 rows, no prev; second page: 5 rows, no next."""
        source = InMemorySource(make_rows(15))

        first = await KeysetPaginator(params(page_size=10)).fetch_window(
            source, ResolvedOrdering()
        )
        assert [row.id for row in first.rows] == list(range(1, 11))
        assert first.has_next is True
        assert first.has_prev is False

        cursor = CursorCodec.encode(first.rows[-1].id)
        second = await KeysetPaginator(params(page_size=10, cursor=cursor)).fetch_window(
            source, ResolvedOrdering()
        )
        assert [row.id for row in second.rows] == list(range(11, 16))
        assert second.has_next is False
        assert second.has_prev is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort", [None, "-id", "score", "-score", "score,-name", "-score,name"])
    @pytest.mark.parametrize("page_size", [1, 3, 4, 7, 16])
    async def test_forward_walk_covers_every_row_once(self, sort, page_size):
        """Concatenated forward pages reproduce the full ordered sequence."""
        source = InMemorySource(make_rows(14))

        pages = await walk_forward(source, sort, page_size)

        assert [row_id for page in pages for row_id in page] == expected_order(source, sort)
        assert all(len(page) == page_size for page in pages[:-1])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort", ["score", "-score", "score,-name", "-score,name"])
    @pytest.mark.parametrize("page_size", [1, 2, 5])
    async def test_nullable_column_walks_cover_every_row_once(self, sort, page_size):
        """Rows without a score are neither skipped nor repeated in either direction."""
        source = InMemorySource(make_nullable_rows(13))
        expected = expected_order(source, sort)

        forward = await walk_forward(source, sort, page_size)
        backward = await walk_backward(source, sort, page_size)

        assert [row_id for page in forward for row_id in page] == expected
        assert [row_id for page in reversed(backward) for row_id in page] == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sort", [None, "-score", "score,-name"])
    async def test_next_then_prev_returns_to_origin(self, sort):
        """Following next and then prev from the new page restores the origin rows."""
        source = InMemorySource(make_rows(14))
        ordering = ordering_for(sort)
        pages = await walk_forward(source, sort, 4)

        for origin in pages[:-1]:
            forward = await KeysetPaginator(
                params(page_size=4, cursor=CursorCodec.encode(origin[-1]))
            ).fetch_window(source, ordering)
            back = await KeysetPaginator(
                params(
                    page_size=4,
                    cursor=CursorCodec.encode(forward.rows[0].id),
                    direction=Traversal.BACKWARD,
                )
            ).fetch_window(source, ordering)

            assert [row.id for row in back.rows] == origin
            assert back.has_next is True

    @pytest.mark.asyncio
    async def test_backward_without_cursor_is_last_page(self):
        """The synthetic last anchor yields the final rows in forward order."""
        source = InMemorySource(make_rows(15))

        window = await KeysetPaginator(
            params(page_size=10, direction=Traversal.BACKWARD)
        ).fetch_window(source, ResolvedOrdering())

        assert [row.id for row in window.rows] == list(range(6, 16))
        assert window.has_next is False
        assert window.has_prev is True

    @pytest.mark.asyncio
    async def test_backward_reaching_start_has_no_prev(self):
        source = InMemorySource(make_rows(15))

        window = await KeysetPaginator(
            params(page_size=10, cursor=CursorCodec.encode(6), direction=Traversal.BACKWARD)
        ).fetch_window(source, ResolvedOrdering())

        assert [row.id for row in window.rows] == [1, 2, 3, 4, 5]
        assert window.has_prev is False
        assert window.has_next is True

    @pytest.mark.asyncio
    async def test_sort_direction_change_affects_only_that_field(self):
        """'-score,name' and 'score,name' differ only in score order."""
        source = InMemorySource(make_rows(9))

        asc = (await walk_forward(source, "score,name", 20))[0]
        desc = (await walk_forward(source, "-score,name", 20))[0]

        by_score = {row.id: row.score for row in source.rows}
        assert [by_score[i] for i in asc] == sorted(by_score[i] for i in asc)
        assert [by_score[i] for i in desc] == sorted((by_score[i] for i in desc), reverse=True)
        for score in range(3):
            assert [i for i in asc if by_score[i] == score] == [
                i for i in desc if by_score[i] == score
            ]

    @pytest.mark.asyncio
    async def test_filter_applies_to_anchor_and_window(self):
        """The synthetic anchor is the first row that passes the filter."""
        source = InMemorySource(make_rows(12))
        builder = PredicateBuilder()
        predicate = builder.build_filter_predicate(parse_filter("name__startswith:row-1"))

        window = await KeysetPaginator(params(page_size=2)).fetch_window(
            source, ResolvedOrdering(), predicate
        )

        assert [row.id for row in window.rows] == [10, 11]
        assert window.has_next is True
        assert source.calls[0][1]["predicate"] == predicate

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_size", [0, -1])
    async def test_non_positive_page_size_is_rejected(self, page_size):
        source = InMemorySource(make_rows(3))

        with pytest.raises(ValidationException):
            await KeysetPaginator(params(page_size=page_size)).fetch_window(
                source, ResolvedOrdering()
            )
        assert source.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cursor", [CursorCodec.encode(999), "not-a-cursor", "e30="])
    async def test_unresolvable_cursor_yields_empty_page(self, cursor):
        """Stale or undecodable cursors are a benign miss, not an error."""
        source = InMemorySource(make_rows(5))

        window = await KeysetPaginator(params(page_size=2, cursor=cursor)).fetch_window(
            source, ResolvedOrdering()
        )

        assert window.rows == []
        assert window.has_next is False
        assert window.has_prev is False

    @pytest.mark.asyncio
    async def test_empty_source(self):
        window = await KeysetPaginator(params(page_size=5)).fetch_window(
            InMemorySource([]), ResolvedOrdering()
        )

        assert window.rows == []
        assert (window.has_next, window.has_prev) == (False, False)

    @pytest.mark.asyncio
    async def test_anchor_probe_precedes_window_fetch(self):
        """One probe, then one over-fetching window query; never a count."""
        source = InMemorySource(make_rows(5))

        await KeysetPaginator(params(page_size=2, cursor=CursorCodec.encode(2))).fetch_window(
            source, ResolvedOrdering()
        )
        await KeysetPaginator(params(page_size=2, direction=Traversal.BACKWARD)).fetch_window(
            source, ResolvedOrdering()
        )

        assert [name for name, _ in source.calls] == ["probe", "fetch", "probe", "fetch"]
        assert source.calls[0][1]["identifier"] == 2
        assert source.calls[1][1]["limit"] == 2 + FORWARD_OVERFETCH
        assert source.calls[3][1]["limit"] == 2 + BACKWARD_OVERFETCH


# ──────────────────────────────────────────────────────────────
# Result envelope and links
# ──────────────────────────────────────────────────────────────


def query_of(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


class TestKeysetLinks:
    """Tests for the PaginatedResult produced by paginate()."""

    @pytest.mark.asyncio
    async def test_links_carry_cursor_and_direction(self):
        source = InMemorySource(make_rows(15))
        request = params(
            page_size=5,
            cursor=CursorCodec.encode(5),
            query=(("sort", "name"), ("cursor", "stale"), ("pageSize", "5")),
        )

        page = await KeysetPaginator(request).paginate(source, ordering_for("name"))

        assert page.meta is None
        assert [row.id for row in page.results] == [6, 7, 8, 9, 10]

        next_query = query_of(page.links.next)
        assert next_query["cursor"] == [CursorCodec.encode(10)]
        assert next_query["direction"] == ["forward"]
        assert next_query["pageSize"] == ["5"]
        assert next_query["sort"] == ["name"]

        prev_query = query_of(page.links.prev)
        assert prev_query["cursor"] == [CursorCodec.encode(6)]
        assert prev_query["direction"] == ["backward"]

    @pytest.mark.asyncio
    async def test_first_and_last_have_no_cursor(self):
        page = await KeysetPaginator(params(page_size=5)).paginate(
            InMemorySource(make_rows(15)), ResolvedOrdering()
        )

        assert page.links.prev is None
        assert "cursor" not in query_of(page.links.first)
        assert "direction" not in query_of(page.links.first)
        assert "cursor" not in query_of(page.links.last)
        assert query_of(page.links.last)["direction"] == ["backward"]

    @pytest.mark.asyncio
    async def test_empty_page_has_no_neighbour_links(self):
        page = await KeysetPaginator(params(page_size=5, cursor=CursorCodec.encode(42))).paginate(
            InMemorySource(make_rows(3)), ResolvedOrdering()
        )

        assert page.results == []
        assert page.links.next is None
        assert page.links.prev is None
        assert page.links.first is not None

    @pytest.mark.asyncio
    async def test_custom_parameter_names(self):
        settings = PaginationSettings(page_size_param="limit", cursor_param="after")

        page = await KeysetPaginator(params(page_size=2), settings).paginate(
            InMemorySource(make_rows(5)), ResolvedOrdering()
        )

        next_query = query_of(page.links.next)
        assert next_query["limit"] == ["2"]
        assert next_query["after"] == [CursorCodec.encode(2)]
