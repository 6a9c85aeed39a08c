"""
Rate limiting (slowapi, fixed window).

Requests are bucketed by user id when the caller authenticated, else by
client IP. The module-level ``limiter`` is shared by every router; create_app
attaches it to ``app.state`` and toggles it from settings.
"""

from __future__ import annotations

from fastapi import Request
from slowapi import Limiter

from config import RateLimitSettings
from shared.ip_utils import get_client_ip

_settings = RateLimitSettings()


class Limits:
    DOCUMENTS = "100 per 10 seconds"
    LOGIN = "5 per minute; 50 per day"
    REGISTER = "5 per minute; 50 per day"
    TOKEN_ISSUE = "10 per minute"


def rate_limit_key_for_request(request: Request) -> str:
    """Bucket by user id when authenticated, else by client IP."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        return f"user:{user_id}"
    settings = getattr(request.app.state, "settings", None)
    trust = bool(settings and settings.store.trust_proxy_headers)
    return get_client_ip(request, trust_proxy_headers=trust) or "unknown"


limiter = Limiter(
    key_func=rate_limit_key_for_request,
    storage_uri=_settings.ratelimit_storage_uri,
    strategy="fixed-window",
    enabled=_settings.ratelimit_enabled,
)
