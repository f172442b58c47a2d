"""
Per-client rate limiting via slowapi.

One shared Limiter so every route counts against the same in-memory store.
Routes opt in with @limiter.limit(rate_limit) and must accept a
`request: Request` parameter. create_app() calls configure_limiter() so the
limit and the on/off switch follow the app's Settings.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import Settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")

_current_limit = Settings.model_fields["RATE_LIMIT"].default


def rate_limit() -> str:
    """Limit string for @limiter.limit, read at request time."""
    return _current_limit


def configure_limiter(settings: Settings) -> Limiter:
    global _current_limit
    _current_limit = settings.RATE_LIMIT
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    # fresh counters for a freshly configured app
    limiter.reset()
    return limiter
