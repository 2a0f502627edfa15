"""Domain exceptions for the querymemo application.

Defines the exception hierarchy shared by infrastructure and presentation.
Presentation layer maps them to HTTP responses in exception handlers.
Cache store failures never reach the requester: QueryCache contains them.
"""

from typing import Any


class QueryMemoException(Exception):
    """Base exception for all querymemo application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, operation).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(QueryMemoException):
    """Raised when input validation fails (e.g. missing query text)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ExecutorNotConfiguredException(QueryMemoException):
    """Raised when a query arrives but no query executor is wired in."""

    def __init__(self) -> None:
        super().__init__(
            "No query executor configured",
            "EXECUTOR_NOT_CONFIGURED",
        )


class CacheStoreError(QueryMemoException):
    """Raised by a cache store when an operation fails (connectivity, serialization).

    QueryCache catches it and degrades to a miss or a no-op.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize with the failed store operation and reason.

        Args:
            operation: Store operation name (get, set, clear).
            reason: Description of the underlying failure.
        """
        super().__init__(
            f"Cache store {operation} failed: {reason}",
            "CACHE_STORE_ERROR",
            {"operation": operation},
        )
        self.operation = operation
