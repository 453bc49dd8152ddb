"""Custom exceptions for userlist."""

from typing import Any


class UserListError(Exception):
    """Base exception for all userlist errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize userlist error.

        Args:
            message: Error message
            details: Additional error details

        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(UserListError):
    """Raised when configuration is invalid or missing."""


class ValidationError(UserListError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class APIError(UserListError):
    """Raised by the HTTP client when the endpoint answers with a non-success status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            status_code: HTTP status code
            message: Error message
            response_text: Raw response text from API
            details: Additional error details

        """
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class FetchFailure(UserListError):
    """A fetch attempt failed, either in transport or while decoding the body.

    This is the only error kind the fetch cache records. Consumers read it from
    the cache entry; it is never raised across the subscription boundary.
    """

