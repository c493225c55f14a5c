"""Typed sort and filter specifications parsed from query strings.

These are request-scoped values: built once from raw query parameters,
consumed by the predicate builder, then discarded.

Example:
    spec = SortSpec((SortTerm(FieldPath("name"), Direction.DESC),))
    spec.fields  # ("name",)
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum


class Direction(StrEnum):
    """Sort direction of a single ordering column."""

    ASC = "ASC"
    DESC = "DESC"

    @property
    def opposite(self) -> Direction:
        return Direction.DESC if self is Direction.ASC else Direction.ASC


class Operator(StrEnum):
    """Closed set of filter operators accepted after ``__`` in a filter key."""

    EQ = "eq"
    NEQ = "neq"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"
    HAS = "has"

    @classmethod
    def lookup(cls, token: str) -> Operator | None:
        """Return the operator named by ``token`` or None if unknown."""
        try:
            return cls(token)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class FieldPath:
    """A bare field name or a single-level ``relation.field`` path.

    Attributes:
        field: Attribute name on the root entity (or on the relation target).
        relation: Relationship traversed first, if any.
    """

    field: str
    relation: str | None = None

    @classmethod
    def parse(cls, raw: str) -> FieldPath | None:
        """Parse ``raw`` into a path, or None when it is not a valid path.

        Only one level of traversal is supported, so ``a.b.c`` is rejected.
        """
        parts = raw.split(".")
        if len(parts) > 2 or not all(parts):
            return None
        if len(parts) == 2:
            return cls(field=parts[1], relation=parts[0])
        return cls(field=parts[0])

    @property
    def dotted(self) -> str:
        return f"{self.relation}.{self.field}" if self.relation else self.field

    def __str__(self) -> str:
        return self.dotted


@dataclass(frozen=True, slots=True)
class SortTerm:
    path: FieldPath
    direction: Direction = Direction.ASC


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Ordered sort terms; position encodes priority (primary first)."""

    terms: tuple[SortTerm, ...] = ()

    def __iter__(self) -> Iterator[SortTerm]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __bool__(self) -> bool:
        return bool(self.terms)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(term.path.dotted for term in self.terms)

    def direction_of(self, dotted: str) -> Direction | None:
        for term in self.terms:
            if term.path.dotted == dotted:
                return term.direction
        return None


@dataclass(frozen=True, slots=True)
class FilterCondition:
    """Operator plus the raw (untransformed) value of one filter clause.

    ``raw_value`` may hold several ``|``-separated alternatives.
    """

    operator: Operator
    raw_value: str

    @property
    def alternatives(self) -> list[str]:
        return self.raw_value.split("|")


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """Mapping of field path to its filter condition."""

    conditions: Mapping[FieldPath, FilterCondition] = field(default_factory=dict)

    def __iter__(self) -> Iterator[FieldPath]:
        return iter(self.conditions)

    def __len__(self) -> int:
        return len(self.conditions)

    def __bool__(self) -> bool:
        return bool(self.conditions)

    def __getitem__(self, dotted: str) -> FilterCondition:
        path = FieldPath.parse(dotted)
        if path is None or path not in self.conditions:
            raise KeyError(dotted)
        return self.conditions[path]

    def __contains__(self, dotted: object) -> bool:
        if not isinstance(dotted, str):
            return False
        path = FieldPath.parse(dotted)
        return path is not None and path in self.conditions

    def items(self) -> Iterator[tuple[FieldPath, FilterCondition]]:
        return iter(self.conditions.items())


@dataclass(frozen=True, slots=True)
class SortAndFilterParams:
    """Parsed sort and filter specifications for one request."""

    sort: SortSpec = field(default_factory=SortSpec)
    filter: FilterSpec = field(default_factory=FilterSpec)


__all__ = [
    "Direction",
    "FieldPath",
    "FilterCondition",
    "FilterSpec",
    "Operator",
    "SortAndFilterParams",
    "SortSpec",
    "SortTerm",
]
