"""Application layer: interfaces the service depends on (DIP)."""

from querymemo.application.interfaces import QueryExecutor

__all__ = ["QueryExecutor"]
