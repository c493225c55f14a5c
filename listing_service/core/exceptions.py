"""Exception classes surfaced by the listing core."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Carries everything needed to render an RFC 7807 Problem Details body.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier.
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=422,
            detail="pageSize must be a positive integer",
            type="validation-error",
            extra={"page_size": 0},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        titles = {
            400: "Bad Request",
            404: "Not Found",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
        }
        return titles.get(status_code, "Error")


class ValidationException(AppException):
    """Raised for invalid pagination input (``pageSize <= 0``, ``page < 1``)
    and for filter values that cannot be coerced to their column type.

    Example:
        raise ValidationException(
            detail="page must be >= 1",
            extra={"page": 0},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "validation-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=422,
            detail=detail,
            type=type,
            title="Validation Error",
            instance=instance,
            extra=extra,
        )


class UnsupportedOperationException(AppException):
    """Raised when a request needs a query shape the backend cannot express.

    The flat-map filter mode has no composite expressions, so an OR group
    (``name:a|b``) is fatal for the request there.
    """

    def __init__(
        self,
        detail: str,
        type: str = "unsupported-operation",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Unsupported Operation",
            instance=instance,
            extra=extra,
        )


__all__ = [
    "AppException",
    "UnsupportedOperationException",
    "ValidationException",
]
