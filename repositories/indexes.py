"""
Collection names and index bootstrap.
"""

from __future__ import annotations

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from shared.logging import get_logger

log = get_logger(__name__)

USERS = "users"
ACCESS_TOKENS = "access-tokens"
DOCUMENTS = "documents"


async def ensure_indexes(db) -> None:
    """Create the indexes the repositories rely on.

    Uniqueness of user emails, token values and each user's non-expiring
    token is enforced here, so a failure aborts startup.
    """
    try:
        await db[USERS].create_index([("email", ASCENDING)], unique=True)

        await db[ACCESS_TOKENS].create_index([("token", ASCENDING)], unique=True)
        await db[ACCESS_TOKENS].create_index([("owner_user_id", ASCENDING)])
        # One non-expiring token per user; expiring and unowned tokens store null
        await db[ACCESS_TOKENS].create_index(
            [("durable_owner", ASCENDING)],
            unique=True,
            partialFilterExpression={"durable_owner": {"$type": "string"}},
        )

        await db[DOCUMENTS].create_index(
            [
                ("route", ASCENDING),
                ("scope.kind", ASCENDING),
                ("scope.value", ASCENDING),
                ("created_at", ASCENDING),
            ]
        )
    except PyMongoError as e:
        log.error("ensure_indexes_failed", error=str(e), error_type=type(e).__name__)
        raise
