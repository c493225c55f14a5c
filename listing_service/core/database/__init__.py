"""Database helpers: declarative base, data sources and the list repository.

Base Classes and Mixins:
    - Base: Declarative base with constraint naming convention
    - IntegerPKMixin, TimestampMixin

Data Sources:
    - DataSource: Protocol the paginators read through
    - SqlAlchemySource: AsyncSession-backed implementation

Repository:
    - BaseRepository[T]: paginate / paginate_flat / paginate_keyset
"""

from __future__ import annotations

from listing_service.core.database.base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
    TimestampMixin,
)
from listing_service.core.database.repository import BaseRepository
from listing_service.core.database.source import (
    DataSource,
    SqlAlchemySource,
    coerce_value,
    compare,
    primary_key_name,
)

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "DataSource",
    "IntegerPKMixin",
    "SqlAlchemySource",
    "TimestampMixin",
    "coerce_value",
    "compare",
    "primary_key_name",
]
