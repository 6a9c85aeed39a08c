"""
FastAPI middleware for automatic request logging and context management.

Provides:
- Request ID generation for correlation (returned as X-Request-ID)
- Request context bound into structlog contextvars for the request lifetime
- Completion log line with status-dependent level and timing
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request

from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

log = get_logger("crudy.request")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return f"req_{uuid.uuid4().hex[:12]}"


def setup_logging_middleware(app: FastAPI, *, trust_proxy_headers: bool = False) -> None:
    """Register the request logging middleware on *app*."""

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        started = time.perf_counter()
        request_id = generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            ip_hash=hash_ip(get_client_ip(request, trust_proxy_headers=trust_proxy_headers)),
        )

        response = await call_next(request)
        duration_ms = int((time.perf_counter() - started) * 1000)

        status_code = response.status_code
        if status_code >= 500:
            log_fn = log.error
        elif status_code >= 400:
            log_fn = log.warning
        else:
            log_fn = log.info
        log_fn("request_completed", status_code=status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        structlog.contextvars.clear_contextvars()
        return response
