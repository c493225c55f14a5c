"""Database settings for the async SQLAlchemy engine.

Environment variables use DB_ prefix.
Example: DB_URL=sqlite+aiosqlite:///./listing.db, DB_ECHO=true
"""

from __future__ import annotations

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Connection settings.

    The default is a private in-memory SQLite database, which is enough for
    the demo routes and the test suite.
    """

    url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Log every emitted SQL statement")
    create_tables: bool = Field(
        default=True,
        description="Create tables for all registered models on startup",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (":memory:" in self.url or self.url.rstrip("/").endswith(":"))


__all__ = ["DatabaseSettings"]
