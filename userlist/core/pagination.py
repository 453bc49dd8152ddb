"""Client-side page windowing over a cached record collection."""

import logging
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from userlist.core.constants import PaginationConstants
from userlist.exceptions import ValidationError

if TYPE_CHECKING:
    from userlist.cache.base import SubscriptionHandle
    from userlist.models.cache import CacheEntry

logger = logging.getLogger(__name__)

FIRST_PAGE = int(PaginationConstants.FIRST_PAGE)


def count_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` records, never less than one."""
    return max(math.ceil(count / page_size), int(PaginationConstants.MIN_TOTAL_PAGES))


def page_window(data: Sequence[Any] | None, page: int, page_size: int) -> list[Any]:
    """Return the records of 1-based ``page``, clipped to the bounds of ``data``."""
    if not data:
        return []
    start = (page - 1) * page_size
    return list(data[start : start + page_size])


class PageView(BaseModel):
    """What the view layer renders for the current page."""

    items: list[Any] = Field(default_factory=list)
    current_page: int = FIRST_PAGE
    total_pages: int = 1
    has_prev: bool = False
    has_next: bool = False


class PageController:
    """Tracks the current page over a record collection.

    The slice and page count are always derived from the data passed in (or
    the bound source's current data), never cached. When bound to a
    subscription handle, every change of the cache entry re-clamps the page:
    the position survives revalidation and only moves down when the new data
    has fewer pages than the current one.
    """

    def __init__(self, page_size: int, source: "SubscriptionHandle | None" = None) -> None:
        """Initialize the controller on the first page.

        Args:
            page_size: Records per page, a positive integer
            source: Optional subscription handle to follow

        Raises:
            ValidationError: If page_size is not a positive integer
        """
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise ValidationError("page_size", page_size, "Page size must be a positive integer")

        self.page_size = page_size
        self.current_page = FIRST_PAGE
        self.source: "SubscriptionHandle | None" = None
        if source is not None:
            self.bind(source)

    def bind(self, source: "SubscriptionHandle") -> None:
        """Follow ``source`` and re-clamp on each of its changes."""
        if self.source is not None:
            self.source.remove_listener(self._on_entry_changed)
        self.source = source
        source.add_listener(self._on_entry_changed)
        self.data_changed(source.data)

    def unbind(self) -> None:
        if self.source is not None:
            self.source.remove_listener(self._on_entry_changed)
            self.source = None

    def _resolve(self, data: Sequence[Any] | None) -> Sequence[Any] | None:
        if data is None and self.source is not None:
            return self.source.data
        return data

    def total_pages(self, data: Sequence[Any] | None = None) -> int:
        data = self._resolve(data)
        return count_pages(len(data) if data else 0, self.page_size)

    def visible_slice(self, data: Sequence[Any] | None = None) -> list[Any]:
        return page_window(self._resolve(data), self.current_page, self.page_size)

    def next(self, data: Sequence[Any] | None = None) -> int:
        """Advance one page; no-op on the last page. Returns the current page."""
        if self.current_page < self.total_pages(data):
            self.current_page += 1
        return self.current_page

    def prev(self) -> int:
        """Go back one page; no-op on the first page. Returns the current page."""
        if self.current_page > FIRST_PAGE:
            self.current_page -= 1
        return self.current_page

    def go_to(self, page: int, data: Sequence[Any] | None = None) -> int:
        """Jump to ``page``, bounded to the page range of ``data``."""
        self.current_page = min(max(page, FIRST_PAGE), self.total_pages(data))
        return self.current_page

    def data_changed(self, data: Sequence[Any] | None = None) -> int:
        """Clamp the current page into the page range of ``data``."""
        total = self.total_pages(data)
        if self.current_page > total:
            logger.debug(f"Clamping page {self.current_page} to {total}")
            self.current_page = total
        return self.current_page

    def view(self, data: Sequence[Any] | None = None) -> PageView:
        data = self._resolve(data)
        total = self.total_pages(data)
        return PageView(
            items=self.visible_slice(data),
            current_page=self.current_page,
            total_pages=total,
            has_prev=self.current_page > FIRST_PAGE,
            has_next=self.current_page < total,
        )

    def _on_entry_changed(self, entry: "CacheEntry") -> None:
        self.data_changed(entry.data)

    def __repr__(self) -> str:
        return f"PageController(page_size={self.page_size}, current_page={self.current_page})"
