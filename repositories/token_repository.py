"""
Repository for the `access-tokens` collection.
"""

from __future__ import annotations

from typing import Optional

from pymongo import ReturnDocument

from schemas.models.token import AccessTokenDoc


class TokenRepository:
    def __init__(self, collection) -> None:
        self._col = collection

    async def find_by_value(self, value: str) -> Optional[AccessTokenDoc]:
        return AccessTokenDoc.from_mongo(await self._col.find_one({"token": value}))

    async def find_durable_for_user(self, user_id: str) -> Optional[AccessTokenDoc]:
        """The user's non-expiring token, if any."""
        raw = await self._col.find_one({"durable_owner": user_id})
        return AccessTokenDoc.from_mongo(raw)

    async def insert(self, doc: AccessTokenDoc) -> AccessTokenDoc:
        """Insert *doc*.

        Raises pymongo's DuplicateKeyError on a taken value, or when the owner
        already holds a non-expiring token.
        """
        await self._col.insert_one(doc.to_mongo())
        return doc

    async def increment_usage(
        self, token_id: str, cap: Optional[int] = None
    ) -> Optional[AccessTokenDoc]:
        """Atomically bump resource_count.

        With a *cap* the update only applies while the count is below it;
        returns None when the cap has been reached.
        """
        query: dict = {"_id": token_id}
        if cap is not None:
            query["resource_count"] = {"$lt": cap}
        raw = await self._col.find_one_and_update(
            query,
            {"$inc": {"resource_count": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return AccessTokenDoc.from_mongo(raw)

    async def decrement_usage(self, token_id: str) -> None:
        await self._col.update_one(
            {"_id": token_id, "resource_count": {"$gt": 0}},
            {"$inc": {"resource_count": -1}},
        )
