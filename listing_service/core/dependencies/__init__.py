"""FastAPI dependencies shared by feature routers."""

from listing_service.core.dependencies.database import DbSession, get_db_session
from listing_service.core.dependencies.pagination import (
    get_pagination_params,
    parse_int,
)
from listing_service.core.dependencies.sort_and_filter import sort_and_filter

__all__ = [
    "DbSession",
    "get_db_session",
    "get_pagination_params",
    "parse_int",
    "sort_and_filter",
]
