"""
Constants and configuration values for userlist.
"""

from enum import IntEnum, StrEnum

# Users endpoint
API_URL = "https://jsonplaceholder.typicode.com/users"

# Version
PACKAGE_VERSION = "0.1.0"


class APIConstants(IntEnum):
    """API-related limits and constants."""

    REQUEST_TIMEOUT = 30
    BACKOFF_MAX_TRIES = 5
    BACKOFF_FACTOR = 2
    BACKOFF_MAX_VALUE = 30


class PaginationConstants(IntEnum):
    """Client-side pagination defaults."""

    FIRST_PAGE = 1
    ITEMS_PER_PAGE = 4
    MIN_TOTAL_PAGES = 1


class FormattingConstants(IntEnum):
    """Formatting constants."""

    JSON_INDENT = 2


class DisplayMessages(StrEnum):
    """User-facing messages shared by the CLI and the TUI."""

    TITLE = "Users list"
    EMPTY = "No users yet."
    FETCH_ERROR = "Sorry, could not get users list, please try again"
    RETRY_HINT = "Press r to try again"
    LOADING = "Loading users..."
