"""
Client IP resolution for FastAPI requests.

The resolved address doubles as the anonymous scope key, so proxy headers are
only consulted when the deployment sits behind a proxy that sets them.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
    "X-Client-IP",
)


def get_client_ip(request: Request, *, trust_proxy_headers: bool = False) -> Optional[str]:
    """Extract the client IP from a FastAPI ``Request``.

    With ``trust_proxy_headers`` the proxy headers are checked in priority
    order before falling back to the direct connection address:

    1. ``CF-Connecting-IP`` — Cloudflare
    2. ``True-Client-IP`` — Akamai and others
    3. ``X-Forwarded-For`` — standard proxy header (first IP in list)
    4. ``X-Real-IP`` — nginx / other reverse proxies
    5. ``X-Client-IP`` — less common

    Returns:
        The resolved client IP string, or ``None`` if none can be found.
    """
    if trust_proxy_headers:
        for header in PROXY_HEADERS:
            ip_value: str | None = request.headers.get(header)
            if ip_value:
                client_ip = ip_value.split(",")[0].strip()
                if client_ip:
                    return client_ip

    if request.client and request.client.host:
        return request.client.host
    return None
