"""Request context management using contextvars.

Provides async-safe storage for the authenticated requester of the current
request. Set by AuthContextMiddleware; read by code that needs the requester
outside of the ASGI scope (e.g. query executors).

Usage:
    set_current_user("user123")
    user_id = get_current_user_id()
"""

from contextvars import ContextVar, Token

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)


def set_current_user(user_id: str | None) -> Token[str | None]:
    """Set the current requester for this request.

    Context is scoped to the current async task. Returns the token so the
    caller can restore the previous value with reset_current_user().
    """
    return _current_user_id.set(user_id)


def reset_current_user(token: Token[str | None]) -> None:
    """Restore the requester that was current before set_current_user()."""
    _current_user_id.reset(token)


def get_current_user_id() -> str | None:
    """Return the current requester ID, or None if anonymous."""
    return _current_user_id.get()
