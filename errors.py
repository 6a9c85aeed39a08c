"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to a uniform problem-detail body:

    {"title": ..., "status": ..., "detail": ..., "code": ...}

Non-AppError exceptions are logged and answered with a 500 (with Sentry
reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.logging import get_logger

log = get_logger(__name__)

_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    429: "Too Many Requests",
    500: "Internal server error",
}


def problem(
    status: int, detail: str, code: str, **extra: Any
) -> dict[str, Any]:
    """Build a problem-detail body; ``None`` extras are left out."""
    body: dict[str, Any] = {
        "title": _TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "code": code,
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        return problem(
            self.status_code,
            self.message,
            self.error_code,
            field=self.field,
            details=self.details,
        )


class ValidationError(AppError):
    """Request input is not well formed (MalformedInput)."""

    status_code = 400
    error_code = "malformed_input"


class PayloadTooLargeError(AppError):
    status_code = 400
    error_code = "payload_too_large"


class QuotaExceededError(AppError):
    status_code = 400
    error_code = "quota_exceeded"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "unauthenticated"


class InvalidTokenError(AppError):
    status_code = 401
    error_code = "invalid_token"


class TokenExpiredError(AppError):
    status_code = 401
    error_code = "token_expired"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


def register_error_handlers(app: FastAPI, *, expose_internal_errors: bool = True) -> None:
    """Register global exception handlers on the FastAPI app.

    ``expose_internal_errors`` echoes the message of unexpected exceptions in
    the 500 body; production apps turn it off.
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
        detail = first.get("msg", "invalid request")
        return JSONResponse(
            status_code=400,
            content=problem(
                400,
                detail,
                ValidationError.error_code,
                field=".".join(loc) or None,
            ),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        log.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
        return JSONResponse(
            status_code=429,
            content=problem(
                429,
                f"ratelimit exceeded {exc.detail}",
                RateLimitError.error_code,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=problem(exc.status_code, str(exc.detail), "http_error"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        detail = str(exc) if expose_internal_errors else "An internal server error occurred."
        return JSONResponse(
            status_code=500,
            content=problem(500, detail, AppError.error_code),
        )
