"""
============================================================================
FILE: limiter.py
LOCATION: records_api/limiter.py
============================================================================

PURPOSE:
    Shared SlowAPI limiter instance for the records API.

ROLE IN PROJECT:
    The application factory attaches this limiter to app.state and toggles
    it from Settings.rate_limit_enabled. The users router decorates the
    login endpoint with a stricter per-client limit.

    The limiter is process-wide state: slowapi binds route limits when the
    routers are imported, before any Settings exist. configure_limiter()
    is therefore the only place Settings are copied into module state, and
    the most recently created app wins.

USAGE:
    from records_api.limiter import limiter, login_limit
============================================================================
"""

from slowapi import Limiter
from slowapi.util import get_remote_address


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100/minute"],
)

_login_limit = "10/minute"


def configure_limiter(enabled: bool, login_rate: str) -> None:
    """Apply Settings to the shared limiter."""
    global _login_limit
    limiter.enabled = enabled
    _login_limit = login_rate


def login_limit() -> str:
    """Current login rate, read by slowapi on each request."""
    return _login_limit
