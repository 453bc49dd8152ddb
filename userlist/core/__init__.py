"""Core functionality module."""

from userlist.core.constants import FormattingConstants, PaginationConstants
from userlist.core.pagination import PageController, PageView, count_pages, page_window

__all__ = [
    "FormattingConstants",
    "PageController",
    "PageView",
    "PaginationConstants",
    "count_pages",
    "page_window",
]
