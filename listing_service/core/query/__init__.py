"""Query-string sort/filter grammar and backend-agnostic predicates.

Parsing:
    - parse_sort / parse_filter: raw strings -> SortSpec / FilterSpec
    - parse_sort_and_filter: both, from an explicit QueryContext

Building:
    - PredicateBuilder.build_ordering: SortSpec -> ResolvedOrdering
    - PredicateBuilder.build_filter_predicate: FilterSpec -> predicate tree
    - PredicateBuilder.build_flat_filter: FilterSpec -> flat map (no OR groups)
"""

from listing_service.core.query.parser import (
    QueryContext,
    parse_filter,
    parse_sort,
    parse_sort_and_filter,
)
from listing_service.core.query.predicates import (
    AllOf,
    AnyOf,
    Comparison,
    FieldRef,
    FlatCondition,
    JoinRegistry,
    OrderTerm,
    Predicate,
    PredicateBuilder,
    ResolvedOrdering,
    all_of,
    transform_value,
)
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

__all__ = [
    "AllOf",
    "AnyOf",
    "Comparison",
    "Direction",
    "FieldPath",
    "FieldRef",
    "FilterCondition",
    "FilterSpec",
    "FlatCondition",
    "JoinRegistry",
    "Operator",
    "OrderTerm",
    "Predicate",
    "PredicateBuilder",
    "QueryContext",
    "ResolvedOrdering",
    "SortAndFilterParams",
    "SortSpec",
    "SortTerm",
    "all_of",
    "parse_filter",
    "parse_sort",
    "parse_sort_and_filter",
    "transform_value",
]
