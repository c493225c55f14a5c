"""Turn sort/filter specifications into orderings and predicate trees.

The output is backend-agnostic: a ``ResolvedOrdering`` of ``OrderTerm``s and a
tree of ``Comparison`` / ``AllOf`` / ``AnyOf`` nodes over ``FieldRef``s. A data
source (see ``listing_service.core.database.source``) compiles them into its
own query language.

Relation paths (``owner.name``) register a join alias on first use; every
later reference to the same relation, from ordering or filtering, reuses it.

Example:
    builder = PredicateBuilder()
    ordering = builder.build_ordering(params.sort)
    predicate = builder.build_filter_predicate(params.filter)
    # builder.joins -> {"owner": "owner_1"}
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from listing_service.core.exceptions import UnsupportedOperationException
from listing_service.core.query.specs import (
    Direction,
    FieldPath,
    FilterSpec,
    Operator,
    SortSpec,
)


@dataclass(frozen=True, slots=True)
class FieldRef:
    """Resolved reference to a column.

    Attributes:
        field: Column attribute name.
        relation: Relationship the column lives behind, if any.
        alias: Join alias registered for ``relation``.
    """

    field: str
    relation: str | None = None
    alias: str | None = None


@dataclass(frozen=True, slots=True)
class OrderTerm:
    ref: FieldRef
    direction: Direction = Direction.ASC

    def reversed(self) -> OrderTerm:
        return OrderTerm(self.ref, self.direction.opposite)


@dataclass(frozen=True, slots=True)
class ResolvedOrdering:
    """Ordering list with join aliases already assigned."""

    terms: tuple[OrderTerm, ...] = ()

    def __iter__(self) -> Iterator[OrderTerm]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    @property
    def refs(self) -> tuple[FieldRef, ...]:
        return tuple(term.ref for term in self.terms)

    def reversed(self) -> ResolvedOrdering:
        """Flip every term's direction."""
        return ResolvedOrdering(tuple(term.reversed() for term in self.terms))

    def with_tiebreaker(self, identity: str) -> ResolvedOrdering:
        """Return an ordering that ends in the unique ``identity`` column.

        Terms after an explicit identity term can never break a tie, so they
        are cut. Without one, the identity is appended ascending.
        """
        identity_ref = FieldRef(identity)
        for index, term in enumerate(self.terms):
            if term.ref == identity_ref:
                return ResolvedOrdering(self.terms[: index + 1])
        return ResolvedOrdering((*self.terms, OrderTerm(identity_ref, Direction.ASC)))


# ──────────────────────────────────────────────────────────────
# Predicate tree
# ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Comparison:
    """Leaf predicate: ``ref <operator> value``.

    ``value`` is already transformed for the operator (wildcards added for
    the pattern operators, a one-element list for ``has``).
    """

    ref: FieldRef
    operator: Operator
    value: Any


@dataclass(frozen=True, slots=True)
class AllOf:
    children: tuple[Predicate, ...]


@dataclass(frozen=True, slots=True)
class AnyOf:
    children: tuple[Predicate, ...]


type Predicate = Comparison | AllOf | AnyOf


def all_of(*predicates: Predicate | None) -> Predicate | None:
    """Conjoin the given predicates, skipping None; None when nothing is left."""
    children = tuple(p for p in predicates if p is not None)
    if not children:
        return None
    if len(children) == 1:
        return children[0]
    return AllOf(children)


def transform_value(value: str, operator: Operator) -> Any:
    """Shape a raw filter alternative for its operator."""
    if operator in (Operator.CONTAINS, Operator.ICONTAINS):
        return f"%{value}%"
    if operator is Operator.STARTSWITH:
        return f"{value}%"
    if operator is Operator.ENDSWITH:
        return f"%{value}"
    if operator is Operator.HAS:
        return [value]
    return value


@dataclass(frozen=True, slots=True)
class FlatCondition:
    """Single operator/value pair for backends without composite predicates."""

    operator: Operator
    value: Any


class JoinRegistry:
    """Assigns one alias per relation, in first-reference order."""

    def __init__(self) -> None:
        self._aliases: dict[str, str] = {}

    def register(self, relation: str) -> str:
        alias = self._aliases.get(relation)
        if alias is None:
            alias = f"{relation}_{len(self._aliases) + 1}"
            self._aliases[relation] = alias
        return alias

    def items(self) -> list[tuple[str, str]]:
        return list(self._aliases.items())

    def __contains__(self, relation: object) -> bool:
        return relation in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    def as_dict(self) -> dict[str, str]:
        return dict(self._aliases)


class PredicateBuilder:
    """Build orderings and predicates for a single request.

    One builder (and its join registry) per request: aliases are shared
    between the ordering and the filter built from it.
    """

    def __init__(self, joins: JoinRegistry | None = None) -> None:
        self.joins = joins if joins is not None else JoinRegistry()

    def resolve(self, path: FieldPath) -> FieldRef:
        if path.relation is None:
            return FieldRef(path.field)
        alias = self.joins.register(path.relation)
        return FieldRef(path.field, relation=path.relation, alias=alias)

    def build_ordering(self, sort: SortSpec) -> ResolvedOrdering:
        return ResolvedOrdering(
            tuple(OrderTerm(self.resolve(term.path), term.direction) for term in sort)
        )

    def build_filter_predicate(self, filters: FilterSpec) -> Predicate | None:
        """Conjunction over fields of disjunctions over ``|`` alternatives."""
        per_field: list[Predicate] = []
        for path, condition in filters.items():
            ref = self.resolve(path)
            alternatives = tuple(
                Comparison(ref, condition.operator, transform_value(alt, condition.operator))
                for alt in condition.alternatives
            )
            per_field.append(alternatives[0] if len(alternatives) == 1 else AnyOf(alternatives))
        return all_of(*per_field)

    def build_flat_filter(self, filters: FilterSpec) -> dict[str, FlatCondition]:
        """Build a flat ``field -> condition`` map.

        Raises:
            UnsupportedOperationException: If a field carries an OR group,
                which a flat map cannot express.
        """
        flat: dict[str, FlatCondition] = {}
        for path, condition in filters.items():
            alternatives = condition.alternatives
            if len(alternatives) > 1:
                raise UnsupportedOperationException(
                    detail=(
                        f"Filter on {path.dotted!r} groups {len(alternatives)} alternatives; "
                        "OR groups need a composable predicate backend"
                    ),
                    extra={"field": path.dotted, "alternatives": len(alternatives)},
                )
            flat[path.dotted] = FlatCondition(
                condition.operator, transform_value(alternatives[0], condition.operator)
            )
        return flat


__all__ = [
    "AllOf",
    "AnyOf",
    "Comparison",
    "FieldRef",
    "FlatCondition",
    "JoinRegistry",
    "OrderTerm",
    "Predicate",
    "PredicateBuilder",
    "ResolvedOrdering",
    "all_of",
    "transform_value",
]
