"""Security: bearer token verification for requester identity."""

from querymemo.infrastructure.security.jwt import create_access_token, verify_token

__all__ = ["create_access_token", "verify_token"]
