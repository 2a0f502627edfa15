"""querymemo: query-identity cache for expensive free-form textual queries."""

__version__ = "1.0.0"
