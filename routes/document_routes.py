"""
User/IP-scoped document routes.

POST   /{route}                    — create (201 {"id": ...})
GET    /{route}/{page}/{pageSize}  — {"data": [...], "totalCount": n}
GET    /{route}/{id}               — payload or 404
PUT    /{route}/{id}               — merge-update or 404
DELETE /{route}/{id}               — delete or 404

An authenticated caller works in its own user scope; everyone else is scoped
by client IP. This router is a catch-all and must be included last.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dependencies import get_document_service, get_request_context, get_scope_resolver
from errors import NotFoundError
from infrastructure.rate_limit import Limits, limiter
from schemas.dto.responses.common import MessageResponse, ProblemResponse
from schemas.dto.responses.document import DocumentCreatedResponse, DocumentListResponse
from services.document_service import DocumentService
from services.scope import RequestContext, ScopeResolver

router = APIRouter(
    tags=["documents"],
    responses={
        400: {"model": ProblemResponse},
        401: {"model": ProblemResponse},
        404: {"model": ProblemResponse},
        429: {"model": ProblemResponse},
    },
)


@router.post("/{route}", response_model=DocumentCreatedResponse, status_code=201)
@limiter.limit(Limits.DOCUMENTS)
async def create_document(
    request: Request,
    route: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> DocumentCreatedResponse:
    scope = resolver.resolve(ctx)
    document_id = await documents.create(scope, route, await request.body())
    return DocumentCreatedResponse(id=document_id)


@router.get("/{route}/{page:int}/{page_size:int}", response_model=DocumentListResponse)
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
    items, total = await documents.list_page(resolver.resolve(ctx), route, page, page_size)
    return DocumentListResponse(data=items, total_count=total)


@router.get("/{route}/{document_id}")
@limiter.limit(Limits.DOCUMENTS)
async def get_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    payload = await documents.get(resolver.resolve(ctx), route, document_id)
    if payload is None:
        raise NotFoundError("Document not found")
    return JSONResponse(content=payload)


@router.put("/{route}/{document_id}", response_model=MessageResponse)
@limiter.limit(Limits.DOCUMENTS)
async def update_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> MessageResponse:
    scope = resolver.resolve(ctx)
    if not await documents.update(scope, route, document_id, await request.body()):
        raise NotFoundError("Document not found")
    return MessageResponse(success=True)


@router.delete("/{route}/{document_id}", response_model=MessageResponse)
@limiter.limit(Limits.DOCUMENTS)
async def delete_document(
    request: Request,
    route: str,
    document_id: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: ScopeResolver = Depends(get_scope_resolver),
    documents: DocumentService = Depends(get_document_service),
) -> MessageResponse:
    if not await documents.delete(resolver.resolve(ctx), route, document_id):
        raise NotFoundError("Document not found")
    return MessageResponse(success=True)
