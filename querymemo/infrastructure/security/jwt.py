"""JWT token creation and verification.

The sub claim of a verified token identifies the requester and becomes the
query cache scope. Uses querymemo.core.config for secret and algorithm.
"""

from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from querymemo.core.config import get_settings
from querymemo.shared.utils.datetime import utc_now

_DEFAULT_EXPIRY = timedelta(hours=8)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with the given claims.

    Args:
        data: Claims to encode (must include sub).
        expires_delta: Optional TTL; defaults to 8 hours.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    to_encode["exp"] = utc_now() + (expires_delta or _DEFAULT_EXPIRY)
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub. Raises ValueError if the token is
    invalid, expired, missing required claims, or no secret is configured.

    Args:
        token: JWT string (e.g. from Authorization header).

    Returns:
        Decoded payload dict.

    Raises:
        ValueError: If token cannot be trusted.
    """
    settings = get_settings()
    secret = settings.secret_key.get_secret_value()
    if not secret:
        raise ValueError("SECRET_KEY not configured; bearer tokens cannot be verified")
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload
