"""Infrastructure: cache stores and security helpers."""
