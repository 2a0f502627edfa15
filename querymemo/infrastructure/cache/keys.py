"""Query cache key derivation. Single place for key format (DRY).

Keys are opaque: never parsed or rebuilt from their components. Trimming
query text is the caller's job (QueryCache), not the deriver's.
"""

import hashlib

from querymemo.core.constants import CACHE_KEY_SEP, QUERY_KEY_LENGTH


def derive_query_key(query_text: str, scope: str = "") -> str:
    """Return a fixed-length hex key for (scope, query_text).

    SHA-256 over the UTF-8 bytes of "<len(scope)>:<scope>:<query_text>",
    truncated to QUERY_KEY_LENGTH hex characters. The length prefix keeps
    the encoding unambiguous for scopes that contain the separator
    ("a:b" + "c" and "a" + "b:c" hash different input). Deterministic
    across processes.

    Args:
        query_text: Query text, already trimmed by the caller.
        scope: Requester scope; "" for unscoped entries.

    Returns:
        Lowercase hex string of length QUERY_KEY_LENGTH.
    """
    full_text = f"{len(scope)}{CACHE_KEY_SEP}{scope}{CACHE_KEY_SEP}{query_text}"
    digest = hashlib.sha256(full_text.encode("utf-8")).hexdigest()
    return digest[:QUERY_KEY_LENGTH]


def namespaced_key(namespace: str, key: str) -> str:
    """Physical store key for key inside namespace (e.g. query_results:<key>)."""
    return f"{namespace}{CACHE_KEY_SEP}{key}"
