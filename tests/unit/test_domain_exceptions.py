"""Tests for domain exceptions (error_code, message, details)."""

from querymemo.domain.exceptions import (
    CacheStoreError,
    ExecutorNotConfiguredException,
    QueryMemoException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """QueryMemoException uses class name as error_code when not provided."""
    exc = QueryMemoException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "QueryMemoException"
    assert exc.details == {}


def test_validation_exception_field_in_details() -> None:
    exc = ValidationException("Query text is required", field="message")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "message"}


def test_executor_not_configured() -> None:
    exc = ExecutorNotConfiguredException()
    assert exc.error_code == "EXECUTOR_NOT_CONFIGURED"
    assert isinstance(exc, QueryMemoException)


def test_cache_store_error_carries_operation() -> None:
    exc = CacheStoreError("get", "connection refused")
    assert exc.operation == "get"
    assert exc.error_code == "CACHE_STORE_ERROR"
    assert "connection refused" in exc.message
    assert exc.details == {"operation": "get"}
