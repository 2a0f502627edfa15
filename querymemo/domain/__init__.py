"""Domain layer: exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from querymemo.domain.exceptions import (
    CacheStoreError,
    ExecutorNotConfiguredException,
    QueryMemoException,
    ValidationException,
)

__all__ = [
    "CacheStoreError",
    "ExecutorNotConfiguredException",
    "QueryMemoException",
    "ValidationException",
]
