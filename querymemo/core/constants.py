"""Core constants: query cache key structure and shared literal values.

Single source of truth for cache key format and defaults (DRY). Used by
infrastructure cache, middleware and settings.
"""

# Logical namespace of the query-result cache inside a shared physical store
QUERY_CACHE_NAMESPACE = "query_results"

# Delimiter between scope and query text (and between namespace and key)
CACHE_KEY_SEP = ":"

# Hex characters kept from the SHA-256 digest
QUERY_KEY_LENGTH = 32

# 10 minutes
DEFAULT_QUERY_CACHE_TTL_SECONDS = 600.0

# Characters of query text included in diagnostic signals
QUERY_LOG_PREVIEW_CHARS = 50

# Request locations consulted for query text, in priority order
QUERY_BODY_FIELDS = ("message", "query")
QUERY_STRING_PARAM = "q"

# Response body field whose value is cached
RESPONSE_DATA_FIELD = "data"
