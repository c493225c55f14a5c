"""Parse the ``sort`` and ``filter`` query-string grammars.

Sort grammar:
    sort=-created_at,name          # DESC created_at, then ASC name

Filter grammar:
    filter=name__icontains:bob,age__gt:25,owner.name:alice|carol

Each filter clause is ``field[__operator]:value``. The value may contain
``:`` but not ``,`` (the clause delimiter). ``|`` separates alternatives that
are ORed together.

Anything the grammar cannot place (unknown fields, empty clauses, fields
outside the allow-list) is dropped without raising, so clients can send
parameters an older server does not understand yet.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

from listing_service.core.query.specs import (
    Direction,
    FieldPath,
    FilterCondition,
    FilterSpec,
    Operator,
    SortAndFilterParams,
    SortSpec,
    SortTerm,
)
from listing_service.infra.logging import get_lazy_logger

lazy_logger = get_lazy_logger(__name__)

SORT_PARAM = "sort"
FILTER_PARAM = "filter"
OPERATOR_SEPARATOR = "__"


@dataclass(frozen=True, slots=True)
class QueryContext:
    """Raw query values of one inbound request.

    The HTTP layer only extracts strings; everything else happens here.

    Attributes:
        params: Raw query parameters (last value wins for repeated keys).
    """

    params: Mapping[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str | None:
        value = self.params.get(name)
        return value if value else None


def parse_sort(raw: str | None, allowed: Collection[str] | None = None) -> SortSpec:
    """Parse a comma-separated sort expression.

    Args:
        raw: Raw ``sort`` parameter, e.g. ``"-name,email"``.
        allowed: Sortable field names; None allows every field.

    Returns:
        SortSpec in the order the fields were listed.
    """
    if not raw:
        return SortSpec()

    terms: dict[FieldPath, Direction] = {}
    for entry in raw.split(","):
        direction = Direction.ASC
        name = entry
        if entry.startswith("-"):
            direction = Direction.DESC
            name = entry[1:]

        if not name:
            continue
        if allowed is not None and name not in allowed:
            lazy_logger.debug(lambda name=name: f"sort: dropping unsortable field {name!r}")
            continue

        path = FieldPath.parse(name)
        if path is None:
            lazy_logger.debug(lambda name=name: f"sort: dropping invalid field path {name!r}")
            continue
        terms[path] = direction

    return SortSpec(tuple(SortTerm(path, direction) for path, direction in terms.items()))


def _split_key(key: str) -> tuple[str, Operator]:
    """Split ``field__operator`` into its parts.

    An unrecognised operator token keeps the whole key as the field name
    and falls back to ``eq``.
    """
    if OPERATOR_SEPARATOR not in key:
        return key, Operator.EQ

    name, _, token = key.partition(OPERATOR_SEPARATOR)
    operator = Operator.lookup(token)
    if operator is None:
        return key, Operator.EQ
    return name, operator


def parse_filter(raw: str | None, allowed: Collection[str] | None = None) -> FilterSpec:
    """Parse a comma-separated filter expression.

    Args:
        raw: Raw ``filter`` parameter, e.g. ``"name__startswith:find"``.
        allowed: Filterable field names; None allows every field.

    Returns:
        FilterSpec keyed by field path. A later clause on the same field
        replaces an earlier one.
    """
    if not raw:
        return FilterSpec()

    conditions: dict[FieldPath, FilterCondition] = {}
    for clause in raw.split(","):
        key, _, value = clause.partition(":")
        if not key or not value:
            continue

        name, operator = _split_key(key)
        if allowed is not None and name not in allowed:
            lazy_logger.debug(lambda name=name: f"filter: dropping unfilterable field {name!r}")
            continue

        path = FieldPath.parse(name)
        if path is None:
            lazy_logger.debug(lambda name=name: f"filter: dropping invalid field path {name!r}")
            continue
        conditions[path] = FilterCondition(operator=operator, raw_value=value)

    return FilterSpec(conditions)


def parse_sort_and_filter(
    context: QueryContext,
    sortable: Collection[str] | None = None,
    filterable: Collection[str] | None = None,
) -> SortAndFilterParams:
    """Parse both specifications from a request context.

    Example:
        context = QueryContext(params={"sort": "-name", "filter": "email__endswith:.com"})
        params = parse_sort_and_filter(context, sortable=["name"], filterable=["email"])
    """
    params = SortAndFilterParams(
        sort=parse_sort(context.get(SORT_PARAM), sortable),
        filter=parse_filter(context.get(FILTER_PARAM), filterable),
    )
    lazy_logger.debug(
        lambda: f"query.parse: sort={list(params.sort.fields)} filter={[str(p) for p in params.filter]}"
    )
    return params


__all__ = [
    "FILTER_PARAM",
    "SORT_PARAM",
    "QueryContext",
    "parse_filter",
    "parse_sort",
    "parse_sort_and_filter",
]
