"""Navigation link rendering.

Links keep every query parameter of the original request (``sort``,
``filter``, anything else) and overwrite only the pagination keys.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING
from urllib.parse import urlencode

if TYPE_CHECKING:
    from listing_service.core.pagination.params import PaginateParams
    from listing_service.core.settings import PaginationSettings


class LinkBuilder:
    """Build page URLs relative to the request URL.

    Args:
        base_url: Scheme, host and path of the request (no query string).
        query: Original query parameters, as a mapping or as ``(key, value)``
            pairs (repeated keys are kept).
        page_param: Name of the page number parameter.
        page_size_param: Name of the page size parameter.
        cursor_param: Name of the cursor parameter.
        direction_param: Name of the traversal direction parameter.

    Example:
        links = LinkBuilder("http://api/items", {"sort": "-name", "page": "2"})
        links.build(page=3, page_size=10)
        # 'http://api/items?sort=-name&page=3&pageSize=10'
    """

    def __init__(
        self,
        base_url: str,
        query: Mapping[str, str] | Iterable[tuple[str, str]] = (),
        *,
        page_param: str = "page",
        page_size_param: str = "pageSize",
        cursor_param: str = "cursor",
        direction_param: str = "direction",
    ) -> None:
        self.base_url = base_url
        self.page_param = page_param
        self.page_size_param = page_size_param
        self.cursor_param = cursor_param
        self.direction_param = direction_param

        pairs = query.items() if isinstance(query, Mapping) else query
        reserved = {page_param, page_size_param, cursor_param, direction_param}
        self._preserved = [(key, value) for key, value in pairs if key not in reserved]

    @classmethod
    def for_params(
        cls,
        params: PaginateParams,
        settings: PaginationSettings | None = None,
    ) -> LinkBuilder:
        """Builder for the request described by ``params``."""
        if settings is None:
            from listing_service.core.settings import get_pagination_settings

            settings = get_pagination_settings()
        return cls(
            params.base_url,
            params.query,
            page_param=settings.page_param,
            page_size_param=settings.page_size_param,
            cursor_param=settings.cursor_param,
            direction_param=settings.direction_param,
        )

    def build(
        self,
        *,
        page: int | None = None,
        page_size: int | None = None,
        cursor: str | None = None,
        direction: str | None = None,
    ) -> str:
        """Render a URL with the given pagination keys; ``None`` leaves a key out."""
        params = list(self._preserved)
        if page is not None:
            params.append((self.page_param, str(page)))
        if page_size is not None:
            params.append((self.page_size_param, str(page_size)))
        if cursor is not None:
            params.append((self.cursor_param, cursor))
        if direction is not None:
            params.append((self.direction_param, direction))

        if params:
            return f"{self.base_url}?{urlencode(params)}"
        return self.base_url


__all__ = ["LinkBuilder"]
