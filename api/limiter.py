"""
api/limiter.py -- Shared slowapi rate limiter for credential endpoints.

api/main.py mounts this instance through SlowAPIMiddleware; api/routes/auth.py
applies login_limit to POST /api/auth/login. One shared instance means one
in-memory counter store. Separate instances per module would each count on
their own and the limit would never trigger.

Counters are keyed by client IP and live in process memory, so they reset on
restart and are not shared between workers.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def login_limit() -> str:
    """Return the configured login limit (LOGIN_RATE_LIMIT, e.g. "10/minute").

    slowapi calls this on every request instead of freezing the value at
    import time.
    """
    return get_settings().login_rate_limit
