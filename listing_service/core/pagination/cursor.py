"""Cursor encoding and decoding for keyset pagination.

A cursor names the boundary record of a page by its identifier only. The
ordering-key values are always re-read from storage, so a cursor stays
valid when the sort changes and never carries stale column values.

Format: URL-safe base64 of compact JSON, for example ``{"id":42}`` encodes to
``eyJpZCI6NDJ9``.
"""

from __future__ import annotations

import base64
from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError


class CursorPayload(BaseModel):
    """Decoded cursor content.

    Attributes:
        id: Identifier of the boundary record. Only scalars are accepted.
    """

    id: StrictInt | StrictStr = Field(description="Identifier of the boundary record")

    model_config = {"frozen": True}


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        cursor = CursorCodec.encode(42)
        CursorCodec.decode(cursor)  # 42
    """

    @staticmethod
    def encode(identifier: Any) -> str:
        """Encode a record identifier to an opaque string."""
        payload = CursorPayload(id=CursorCodec._serialize(identifier))
        return base64.urlsafe_b64encode(payload.model_dump_json().encode()).decode()

    @staticmethod
    def decode(cursor: str) -> int | str:
        """Decode a cursor string back to the identifier it carries.

        Raises:
            ValueError: If cursor is invalid or corrupted, or its identifier
                is not a plain integer or string.
        """
        try:
            json_str = base64.urlsafe_b64decode(cursor.encode()).decode()
            return CursorPayload.model_validate_json(json_str).id
        except ValidationError as e:
            raise ValueError(f"Invalid cursor: {e.error_count()} validation error(s)") from e
        except ValueError as e:
            raise ValueError(f"Invalid cursor: {e}") from e

    @staticmethod
    def create_cursor(record: Any, identity: str) -> str:
        """Create a cursor pointing at ``record``.

        Args:
            record: Model instance returned by the data source.
            identity: Name of the identifier attribute.
        """
        return CursorCodec.encode(getattr(record, identity))

    @staticmethod
    def _serialize(value: Any) -> Any:
        if isinstance(value, datetime | date):
            return value.isoformat()
        if isinstance(value, UUID):
            return str(value)
        return value


__all__ = ["CursorCodec", "CursorPayload"]
