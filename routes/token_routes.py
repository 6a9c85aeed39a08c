"""
Token-scoped document routes.

GET    /api/token (alias /generate-token)        — fetch or issue the caller's durable token
POST   /api/{token}/{route}                      — create; registers an unknown token on first use
GET    /api/{token}/{route}/{page}/{pageSize}    — paginated list
GET    /api/{token}/{route}/{id}                 — fetch
PUT    /api/{token}/{route}/{id}                 — merge-update
DELETE /api/{token}/{route}/{id}                 — delete

Every document operation runs under Token(token_id). Only create may
register a token; the other operations need one that already exists.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dependencies import (
    get_document_service,
    get_request_context,
    get_scope_resolver,
    get_token_service,
    require_user,
)
from errors import NotFoundError
from infrastructure.rate_limit import Limits, limiter
from schemas.dto.responses.common import MessageResponse, ProblemResponse
from schemas.dto.responses.document import DocumentCreatedResponse, DocumentListResponse
from schemas.dto.responses.token import AccessTokenResponse
from services.document_service import DocumentService
from services.scope import RequestContext, ScopeResolver
from services.token_service import TokenService

router = APIRouter(
    tags=["token documents"],
    responses={
        400: {"model": ProblemResponse},
        401: {"model": ProblemResponse},
        404: {"model": ProblemResponse},
        429: {"model": ProblemResponse},
    },
)


@router.get("/api/token", response_model=AccessTokenResponse)
@router.get("/generate-token", response_model=AccessTokenResponse, include_in_schema=False)
@limiter.limit(Limits.TOKEN_ISSUE)
async def get_access_token(
    request: Request,
    ctx: RequestContext = Depends(require_user),
    tokens: TokenService = Depends(get_token_service),
) -> AccessTokenResponse:
    access = await tokens.get_or_issue(ctx.user_id, ctx.ip)
    return AccessTokenResponse.from_doc(access)


@router.post(
    "/api/{token}/{route}", response_model=DocumentCreatedResponse, status_code=201
)
@limiter.limit(Limits.DOCUMENTS)
async def create_document(
    request: Request,
    route: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> DocumentCreatedResponse:
    body = await request.body()
    documents.validate_write(route, body)
    resolved = await resolver.resolve_token(ctx, provision=True)
    document_id = await documents.create(
        resolved.scope, route, body, access=resolved.access
    )
    return DocumentCreatedResponse(id=document_id)


@router.get(
    "/api/{token}/{route}/{page:int}/{page_size:int}", response_model=DocumentListResponse
)
@limiter.limit(Limits.DOCUMENTS)
async def list_documents(
    request: Request,
    route: str,
    page: int,
    page_size: int,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    resolved = await resolver.resolve_token(ctx)
    items, total = await documents.list_page(resolved.scope, route, page, page_size)
    return DocumentListResponse(data=items, total_count=total)


@router.get("/api/{token}/{route}/{document_id}")
@limiter.limit(Limits.DOCUMENTS)
async def get_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    resolved = await resolver.resolve_token(ctx)
    payload = await documents.get(resolved.scope, route, document_id)
    if payload is None:
        raise NotFoundError("Document not found")
    return JSONResponse(content=payload)


@router.put("/api/{token}/{route}/{document_id}", response_model=MessageResponse)
@limiter.limit(Limits.DOCUMENTS)
async def update_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> MessageResponse:
    body = await request.body()
    documents.validate_write(route, body)
    resolved = await resolver.resolve_token(ctx)
    if not await documents.update(resolved.scope, route, document_id, body):
        raise NotFoundError("Document not found")
    return MessageResponse(success=True)


@router.delete("/api/{token}/{route}/{document_id}", response_model=MessageResponse)
@limiter.limit(Limits.DOCUMENTS)
async def delete_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> MessageResponse:
    resolved = await resolver.resolve_token(ctx)
    if not await documents.delete(resolved.scope, route, document_id):
        raise NotFoundError("Document not found")
    return MessageResponse(success=True)
