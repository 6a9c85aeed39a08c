"""
Repository for the `users` collection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from schemas.models.user import UserDoc


class UserRepository:
    def __init__(self, collection) -> None:
        self._col = collection

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"email": email}))

    async def find_by_id(self, user_id: str) -> Optional[UserDoc]:
        return UserDoc.from_mongo(await self._col.find_one({"_id": user_id}))

    async def insert(self, doc: UserDoc) -> UserDoc:
        """Insert *doc*; raises pymongo's DuplicateKeyError on a taken email."""
        await self._col.insert_one(doc.to_mongo())
        return doc

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> bool:
        result = await self._col.update_one({"_id": user_id}, {"$set": fields})
        return result.matched_count > 0

    async def record_login(self, user_id: str, when: datetime) -> None:
        await self._col.update_one({"_id": user_id}, {"$set": {"last_login_at": when}})
