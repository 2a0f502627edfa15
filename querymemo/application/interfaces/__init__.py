"""Application interfaces (ports)."""

from querymemo.application.interfaces.query_executor import QueryExecutor

__all__ = ["QueryExecutor"]
