"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Repositories and services are built per request
from the handles stored on app.state.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import jwt
from fastapi import Depends, Request

from config import AppSettings
from errors import AuthenticationError
from repositories.document_repository import DocumentRepository
from repositories.indexes import ACCESS_TOKENS, DOCUMENTS, USERS
from repositories.token_repository import TokenRepository
from repositories.user_repository import UserRepository
from services.auth_service import AuthService
from services.document_service import DocumentService
from services.jwt_service import JwtService
from services.scope import RequestContext, ScopeResolver
from services.token_service import TokenService
from shared.ip_utils import get_client_ip
from shared.logging import get_logger

log = get_logger(__name__)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


# ── Repositories ────────────────────────────────────────────────────────────


async def get_user_repo(db=Depends(get_db)) -> UserRepository:
    return UserRepository(db[USERS])


async def get_token_repo(db=Depends(get_db)) -> TokenRepository:
    return TokenRepository(db[ACCESS_TOKENS])


async def get_document_repo(db=Depends(get_db)) -> DocumentRepository:
    return DocumentRepository(db[DOCUMENTS])


# ── Services ────────────────────────────────────────────────────────────────


def get_jwt_service(settings: AppSettings = Depends(get_settings)) -> JwtService:
    return JwtService(settings.jwt)


async def get_token_service(
    repo: TokenRepository = Depends(get_token_repo),
    settings: AppSettings = Depends(get_settings),
) -> TokenService:
    store = settings.store
    return TokenService(
        repo,
        trial_token=store.trial_token,
        trial_quota=store.trial_token_quota,
        provisioned_ttl=timedelta(seconds=store.provisioned_token_ttl_seconds),
    )


async def get_document_service(
    repo: DocumentRepository = Depends(get_document_repo),
    tokens: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_settings),
) -> DocumentService:
    return DocumentService(
        repo,
        tokens,
        max_payload_units=settings.store.max_payload_units,
        max_page_size=settings.store.max_page_size,
    )


async def get_scope_resolver(
    tokens: TokenService = Depends(get_token_service),
) -> ScopeResolver:
    return ScopeResolver(tokens)


async def get_auth_service(
    users: UserRepository = Depends(get_user_repo),
    jwt_service: JwtService = Depends(get_jwt_service),
) -> AuthService:
    return AuthService(users, jwt_service)


# ── Request context ─────────────────────────────────────────────────────────


def _bearer_credentials(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


async def get_request_context(
    request: Request,
    settings: AppSettings = Depends(get_settings),
    jwt_service: JwtService = Depends(get_jwt_service),
) -> RequestContext:
    """Collect the caller facts of this request.

    A missing or unusable bearer JWT leaves the caller anonymous; routes that
    need an identity depend on require_user instead.
    """
    user_id = email = None
    roles: tuple[str, ...] = ()

    credentials = _bearer_credentials(request)
    if credentials is not None:
        try:
            claims = jwt_service.verify_access_jwt(credentials)
        except jwt.InvalidTokenError as exc:
            log.info("bearer_rejected", reason=type(exc).__name__)
        else:
            user_id = claims["sub"]
            email = claims.get("email")
            roles = tuple(claims.get("roles") or ())
            # Read by the rate limiter's key function
            request.state.user_id = user_id

    return RequestContext(
        user_id=user_id,
        email=email,
        roles=roles,
        ip=get_client_ip(request, trust_proxy_headers=settings.store.trust_proxy_headers),
        token=request.path_params.get("token"),
    )


async def require_user(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """Like get_request_context, but answers 401 for anonymous callers."""
    if not ctx.is_authenticated:
        raise AuthenticationError("Authentication required")
    return ctx
