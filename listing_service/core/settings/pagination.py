"""Pagination settings for list endpoints.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_PAGE_SIZE=25, PAGINATION_MAX_PAGE_SIZE=100
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_page_size: Page size used when ``pageSize`` is absent or unparsable.
        max_page_size: Hard cap applied to any requested ``pageSize``.
        page_param: Query parameter holding the 1-based page number.
        page_size_param: Query parameter holding the page size.
        cursor_param: Query parameter holding an opaque keyset cursor.
        direction_param: Query parameter holding the keyset traversal direction.
    """

    default_page_size: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default page size when pageSize is not specified",
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    page_param: str = Field(default="page", min_length=1)
    page_size_param: str = Field(default="pageSize", min_length=1)
    cursor_param: str = Field(default="cursor", min_length=1)
    direction_param: str = Field(default="direction", min_length=1)

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )


__all__ = ["PaginationSettings"]
