"""
Domain-level exceptions for the typeahead engine.

Cancellation is an internal signal and never reaches the input layer;
fetch failures degrade to an empty suggestion list.
"""

from typing import Optional


class DomainException(Exception):
    """Base exception for all domain-level errors."""
    pass


class ValidationError(DomainException):
    """Raised when domain validation rules are violated."""
    pass


class InvalidQueryError(ValidationError):
    """Raised when a query is not a string (None or other misuse upstream)."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Query must be a string, got {type(value).__name__}")


class ConfigurationError(DomainException):
    """Raised when configuration is invalid or missing."""
    pass


class ProcessingError(DomainException):
    """Base exception for processing errors."""
    pass


class CancelledRequest(ProcessingError):
    """A suggestion request was superseded or torn down. Expected and silent."""

    def __init__(self, query: str, version: int):
        self.query = query
        self.version = version
        super().__init__(f"Suggestion request {version} for {query!r} was cancelled")


class SuggestionFetchError(ProcessingError):
    """Raised when the suggestion source fails (network, status or payload)."""

    def __init__(
        self,
        message: str,
        *,
        query: Optional[str] = None,
        status_code: Optional[int] = None,
        retryable: bool = True
    ):
        self.query = query
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class StorageError(DomainException):
    """Raised when the key-value store backing history fails."""
    pass


class RateLimitExceededError(DomainException):
    """Raised when rate limits are exceeded."""

    def __init__(
        self,
        limit_type: str,
        limit_value: int,
        time_window: str,
        retry_after: int = None,
        identifier: str = None
    ):
        self.limit_type = limit_type
        self.limit_value = limit_value
        self.time_window = time_window
        self.retry_after = retry_after
        self.identifier = identifier

        message = f"Rate limit exceeded: {limit_value} requests per {time_window}"
        if identifier:
            message += f" for {identifier}"
        if retry_after:
            message += f". Retry after {retry_after} seconds"

        super().__init__(message)
