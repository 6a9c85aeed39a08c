"""
Repository for the `documents` collection.

Every query is filtered by route and scope; there is no method that reaches a
document without both.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo import ASCENDING

from schemas.models.document import DataDoc, ScopeEntry


def _scope_filter(route: str, scope: ScopeEntry) -> dict[str, Any]:
    return {"route": route, "scope.kind": scope.kind, "scope.value": scope.value}


class DocumentRepository:
    # created_at alone ties on bulk inserts; _id breaks the tie deterministically
    LIST_SORT = [("created_at", ASCENDING), ("_id", ASCENDING)]

    def __init__(self, collection) -> None:
        self._col = collection

    async def insert(self, doc: DataDoc) -> str:
        await self._col.insert_one(doc.to_mongo())
        return doc.id

    async def find(self, route: str, scope: ScopeEntry, document_id: str) -> Optional[DataDoc]:
        query = {"_id": document_id, **_scope_filter(route, scope)}
        return DataDoc.from_mongo(await self._col.find_one(query))

    async def list_page(
        self, route: str, scope: ScopeEntry, skip: int, limit: int
    ) -> list[DataDoc]:
        cursor = (
            self._col.find(_scope_filter(route, scope))
            .sort(self.LIST_SORT)
            .skip(skip)
            .limit(limit)
        )
        return [DataDoc.from_mongo(raw) for raw in await cursor.to_list()]

    async def count(self, route: str, scope: ScopeEntry) -> int:
        return await self._col.count_documents(_scope_filter(route, scope))

    async def replace_payload(
        self,
        route: str,
        scope: ScopeEntry,
        document_id: str,
        payload: dict[str, Any],
        updated_at: datetime,
    ) -> bool:
        result = await self._col.update_one(
            {"_id": document_id, **_scope_filter(route, scope)},
            {"$set": {"payload": payload, "updated_at": updated_at}},
        )
        return result.matched_count > 0

    async def delete(self, route: str, scope: ScopeEntry, document_id: str) -> bool:
        result = await self._col.delete_one({"_id": document_id, **_scope_filter(route, scope)})
        return result.deleted_count > 0
