"""
Generic document CRUD engine.

Stores client JSON objects per route, isolated by scope. Routes are
normalized (trimmed, lower-cased) on every operation. Not-found is an
ordinary result (None / False), never an exception.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from errors import ValidationError
from repositories.document_repository import DocumentRepository
from schemas.models.document import DataDoc
from schemas.models.token import AccessTokenDoc
from services.scope import ScopeKey
from services.token_service import TokenService
from shared.datetime_utils import utcnow
from shared.generators import generate_document_id
from shared.logging import get_logger
from shared.payload import merge_payload, parse_payload, with_id
from shared.validators import normalize_route

log = get_logger(__name__)


class DocumentService:
    def __init__(
        self,
        repo: DocumentRepository,
        tokens: TokenService,
        *,
        max_payload_units: int = 50_000,
        max_page_size: int = 1_000,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repo
        self._tokens = tokens
        self._max_units = max_payload_units
        self._max_page_size = max_page_size
        self._clock = clock

    @staticmethod
    def _route(route: str) -> str:
        normalized = normalize_route(route)
        if not normalized:
            raise ValidationError("route is required", field="route")
        return normalized

    def validate_write(self, route: str, raw_body: bytes) -> None:
        """Run the create/update input checks without touching the store.

        Token routes call this before resolving the token so a bad body never
        provisions one.
        """
        self._route(route)
        parse_payload(raw_body, self._max_units)

    async def create(
        self,
        scope: ScopeKey,
        route: str,
        raw_body: bytes,
        *,
        access: Optional[AccessTokenDoc] = None,
    ) -> str:
        """Store *raw_body* under *route* and return the new document id.

        When *access* is given the document counts against that token; the
        count is reserved before the insert so a capped token never ends up
        with an extra document.
        """
        route = self._route(route)
        data = parse_payload(raw_body, self._max_units)

        document_id = generate_document_id()
        doc = DataDoc(
            _id=document_id,
            route=route,
            scope=scope.to_entry(),
            payload=with_id(document_id, data),
            created_at=self._clock(),
        )

        if access is not None:
            await self._tokens.record_use(access)
        try:
            await self._repo.insert(doc)
        except Exception:
            if access is not None:
                await self._tokens.release_use(access)
            raise

        log.info("document_created", route=route, scope_kind=scope.kind, document_id=document_id)
        return document_id

    async def list_page(
        self, scope: ScopeKey, route: str, page: int, page_size: int
    ) -> tuple[list[dict[str, Any]], int]:
        """One page of payloads plus the total count for route + scope."""
        route = self._route(route)
        if page < 1:
            raise ValidationError("page must be at least 1", field="page")
        if not 1 <= page_size <= self._max_page_size:
            raise ValidationError(
                f"pageSize must be between 1 and {self._max_page_size}", field="pageSize"
            )

        entry = scope.to_entry()
        docs = await self._repo.list_page(route, entry, (page - 1) * page_size, page_size)
        total = await self._repo.count(route, entry)
        return [doc.payload for doc in docs], total

    async def get(self, scope: ScopeKey, route: str, document_id: str) -> Optional[dict[str, Any]]:
        doc = await self._repo.find(self._route(route), scope.to_entry(), document_id)
        return doc.payload if doc is not None else None

    async def update(
        self, scope: ScopeKey, route: str, document_id: str, raw_body: bytes
    ) -> bool:
        """Merge *raw_body* into the stored payload; False when nothing matches."""
        route = self._route(route)
        patch = parse_payload(raw_body, self._max_units)

        entry = scope.to_entry()
        doc = await self._repo.find(route, entry, document_id)
        if doc is None:
            return False

        merged = merge_payload(doc.payload, patch)
        updated = await self._repo.replace_payload(
            route, entry, document_id, merged, self._clock()
        )
        if updated:
            log.info("document_updated", route=route, scope_kind=scope.kind, document_id=document_id)
        return updated

    async def delete(self, scope: ScopeKey, route: str, document_id: str) -> bool:
        route = self._route(route)
        deleted = await self._repo.delete(route, scope.to_entry(), document_id)
        if deleted:
            log.info("document_deleted", route=route, scope_kind=scope.kind, document_id=document_id)
        return deleted
