"""Data sources the paginators read from.

The paginators only need a handful of capabilities from storage: apply an
ordering, apply a predicate tree, limit/offset, fetch the ordering-key tuple
of one row (by identifier or as the first row under an ordering) and count.
``DataSource`` names that contract; ``SqlAlchemySource`` implements it for an
``AsyncSession`` and a declarative model.

Example:
    builder = PredicateBuilder()
    source = SqlAlchemySource(session, Item, joins=builder.joins)
    rows = await source.fetch(builder.build_ordering(sort), predicate, limit=10)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Protocol, cast

from sqlalchemy import ARRAY, and_, func, inspect as sa_inspect, or_, select
from sqlalchemy.orm import ColumnProperty, aliased

from listing_service.core.exceptions import UnsupportedOperationException, ValidationException
from listing_service.core.query import (
    AllOf,
    AnyOf,
    Comparison,
    Direction,
    FieldPath,
    FieldRef,
    FlatCondition,
    JoinRegistry,
    Operator,
    ResolvedOrdering,
)
from listing_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

    from listing_service.core.query import Predicate

lazy_logger = get_lazy_logger(__name__)

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


class DataSource[T](Protocol):
    """Storage capabilities required by the paginators."""

    @property
    def identity(self) -> str:
        """Name of the unique identifier field used as the tiebreaker."""
        ...

    async def fetch(
        self,
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[T]: ...

    async def probe(
        self,
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
        *,
        identifier: Any = None,
    ) -> tuple[Any, ...] | None:
        """Ordering-key tuple of one row, or None when no row matches.

        With ``identifier`` the row is looked up by identity; otherwise it is
        the first row under ``ordering``.
        """
        ...

    async def count(self, predicate: Predicate | None = None) -> int: ...

    def identify(self, record: T) -> Any: ...


def primary_key_name(model: type[Any]) -> str:
    """Attribute name of the model's (first) primary key column."""
    mapper = sa_inspect(model)
    column = mapper.primary_key[0]
    return mapper.get_property_by_column(column).key


def coerce_value(column: Any, value: Any) -> Any:
    """Convert a raw query-string value to the column's Python type.

    Non-string values (anchor tuples read back from the database, lists
    for ``has``) pass through untouched.

    Raises:
        ValidationException: If the string does not parse as the column type.
    """
    return _coerce(column.type, column.key, value)


def _coerce(sql_type: Any, key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value

    try:
        python_type = sql_type.python_type
    except NotImplementedError:
        return value

    try:
        if python_type is bool:
            lowered = value.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if python_type is int:
            return int(value)
        if python_type is float:
            return float(value)
        if python_type is Decimal:
            return Decimal(value)
        if python_type is datetime:
            return datetime.fromisoformat(value)
        if python_type is date:
            return date.fromisoformat(value)
        if python_type is uuid.UUID:
            return uuid.UUID(value)
    except (ValueError, InvalidOperation) as e:
        raise ValidationException(
            detail=f"Invalid value {value!r} for field {key!r}",
            extra={"field": key, "value": value, "expected": python_type.__name__},
        ) from e
    return value


def compare(column: Any, operator: Operator, value: Any) -> ColumnElement[bool]:
    """Render ``column <operator> value`` as a SQLAlchemy expression."""
    match operator:
        case Operator.CONTAINS | Operator.STARTSWITH | Operator.ENDSWITH:
            return column.like(value)
        case Operator.ICONTAINS:
            return column.ilike(value)
        case Operator.HAS:
            if not isinstance(column.type, ARRAY):
                raise UnsupportedOperationException(
                    detail=f"Operator 'has' needs a multi-valued column, {column.key!r} is not one",
                    extra={"field": column.key},
                )
            item_type = column.type.item_type
            items = [_coerce(item_type, column.key, item) for item in value]
            return column.contains(items)

    if value is None and operator in (Operator.EQ, Operator.NEQ):
        return column.is_(None) if operator is Operator.EQ else column.is_not(None)

    value = coerce_value(column, value)
    match operator:
        case Operator.NEQ:
            return column != value
        case Operator.GT:
            return column > value
        case Operator.LT:
            return column < value
        case Operator.GTE:
            return column >= value
        case Operator.LTE:
            return column <= value
    return column == value


class SqlAlchemySource[T]:
    """``DataSource`` over an async SQLAlchemy session and a mapped model.

    Relation references (``FieldRef.relation``) are LEFT OUTER JOINed once
    per relation under the alias registered in ``joins``, so an ordering and
    a predicate over the same relation share a single join.

    Args:
        session: Session the queries run on.
        model: Declarative model class being listed.
        statement: Base select (defaults to ``select(model)``); use it for
            loader options or fixed criteria.
        joins: Join registry shared with the ``PredicateBuilder``.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[T],
        *,
        statement: Select[tuple[T]] | None = None,
        joins: JoinRegistry | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.statement = statement if statement is not None else select(model)
        self.joins = joins if joins is not None else JoinRegistry()
        self._identity = primary_key_name(model)
        self._aliases: dict[str, Any] = {}

    @property
    def identity(self) -> str:
        return self._identity

    def identify(self, record: T) -> Any:
        return getattr(record, self._identity)

    # ──────────────────────────────────────────────────────────────
    # Query capabilities
    # ──────────────────────────────────────────────────────────────

    async def fetch(
        self,
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[T]:
        stmt = self.select(ordering, predicate)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())
        lazy_logger.debug(
            lambda: f"source.fetch: {self.model.__name__}(limit={limit}, offset={offset}) "
            f"-> {len(rows)} rows"
        )
        return rows

    async def probe(
        self,
        ordering: ResolvedOrdering,
        predicate: Predicate | None = None,
        *,
        identifier: Any = None,
    ) -> tuple[Any, ...] | None:
        columns = [self.column(term.ref) for term in ordering]
        if identifier is not None:
            pk = self.column(FieldRef(self._identity))
            try:
                identifier = coerce_value(pk, identifier)
            except ValidationException:
                # An identifier of the wrong type cannot name any row
                lazy_logger.debug(lambda: f"source.probe: unusable identifier {identifier!r}")
                return None
            stmt = self._with_joins(self.statement.where(pk == identifier))
        else:
            stmt = self.select(ordering, predicate)
        # add_columns keeps the entity FROM and every join of the base statement
        stmt = stmt.add_columns(*columns).limit(1)

        row = (await self.session.execute(stmt)).first()
        key = tuple(row[1:]) if row is not None else None
        lazy_logger.debug(
            lambda: f"source.probe: {self.model.__name__}(identifier={identifier!r}) -> {key!r}"
        )
        return key

    async def count(self, predicate: Predicate | None = None) -> int:
        stmt = self.select(None, predicate)
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()
        lazy_logger.debug(lambda: f"source.count: {self.model.__name__} -> {total}")
        return int(total)

    def filter_flat(self, conditions: Mapping[str, FlatCondition]) -> SqlAlchemySource[T]:
        """Return a source whose base statement carries flat ``field -> condition`` criteria.

        Relation fields use an EXISTS test (``relationship.has(...)``) rather
        than a join, so they never interfere with the ordering's joins.
        """
        criteria: list[ColumnElement[bool]] = []
        for dotted, condition in conditions.items():
            path = FieldPath.parse(dotted)
            if path is None:
                continue
            if path.relation is None:
                column = self._model_column(self.model, path.field)
                criteria.append(compare(column, condition.operator, condition.value))
                continue
            relationship = self._relationship(path.relation)
            target = relationship.mapper.class_
            column = self._model_column(target, path.field)
            criteria.append(
                getattr(self.model, path.relation).has(
                    compare(column, condition.operator, condition.value)
                )
            )

        statement = self.statement.where(*criteria) if criteria else self.statement
        return SqlAlchemySource(self.session, self.model, statement=statement, joins=self.joins)

    # ──────────────────────────────────────────────────────────────
    # Compilation
    # ──────────────────────────────────────────────────────────────

    def select(
        self,
        ordering: ResolvedOrdering | None,
        predicate: Predicate | None = None,
    ) -> Select[tuple[T]]:
        """Base statement with predicate, ordering and the joins they need."""
        where = self.compile(predicate) if predicate is not None else None
        order_by = [self.order_clause(term.ref, term.direction) for term in ordering or ()]

        stmt = self._with_joins(self.statement)
        if where is not None:
            stmt = stmt.where(where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        return stmt

    def compile(self, predicate: Predicate) -> ColumnElement[bool]:
        if isinstance(predicate, Comparison):
            return compare(self.column(predicate.ref), predicate.operator, predicate.value)
        if isinstance(predicate, AllOf):
            return and_(*(self.compile(child) for child in predicate.children))
        if isinstance(predicate, AnyOf):
            return or_(*(self.compile(child) for child in predicate.children))
        raise TypeError(f"Unknown predicate node: {predicate!r}")

    def order_clause(self, ref: FieldRef, direction: Direction) -> ColumnElement[Any]:
        """NULL sorts as the smallest value on every backend."""
        column = self.column(ref)
        if direction is Direction.DESC:
            return column.desc().nulls_last()
        return column.asc().nulls_first()

    def column(self, ref: FieldRef) -> InstrumentedAttribute[Any]:
        """Resolve a field reference to a column on the model or a join alias."""
        if ref.relation is None:
            return self._model_column(self.model, ref.field)
        alias_name = self.joins.register(ref.relation)
        return self._model_column(self._alias(ref.relation, alias_name), ref.field)

    def _alias(self, relation: str, alias_name: str) -> Any:
        alias = self._aliases.get(relation)
        if alias is None:
            target = self._relationship(relation).mapper.class_
            alias = aliased(target, name=alias_name)
            self._aliases[relation] = alias
        return alias

    def _with_joins(self, stmt: Select[tuple[T]]) -> Select[tuple[T]]:
        for relation, alias_name in self.joins.items():
            alias = self._alias(relation, alias_name)
            stmt = stmt.outerjoin(getattr(self.model, relation).of_type(alias))
        return stmt

    def _relationship(self, relation: str) -> Any:
        relationship = sa_inspect(self.model).relationships.get(relation)
        if relationship is None:
            raise ValidationException(
                detail=f"Unknown relation {relation!r} on {self.model.__name__}",
                extra={"relation": relation},
            )
        return relationship

    @staticmethod
    def _model_column(entity: Any, field: str) -> InstrumentedAttribute[Any]:
        column = getattr(entity, field, None)
        if column is None or not isinstance(getattr(column, "property", None), ColumnProperty):
            raise ValidationException(
                detail=f"Unknown field {field!r}",
                extra={"field": field},
            )
        return cast("InstrumentedAttribute[Any]", column)



__all__ = [
    "DataSource",
    "SqlAlchemySource",
    "coerce_value",
    "compare",
    "primary_key_name",
]
