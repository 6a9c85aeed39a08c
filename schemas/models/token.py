"""
Access token document model.

Maps to the `access-tokens` MongoDB collection.

`token` is the bearer value callers put in the URL path, stored as a
canonical GUID. It is not a credential for an account: whoever holds it
shares the token's document scope, which is why it is kept in plaintext and
can be handed back to its owner later.

expires_at = None means the token never expires. resource_count counts the
documents created under the token.

durable_owner is stored only so a unique partial index can hold each user to
one non-expiring token; it is derived, never set.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, computed_field

from schemas.models.base import MongoBaseModel


class AccessTokenDoc(MongoBaseModel):
    """Document model for the `access-tokens` collection."""

    token: str
    owner_user_id: Optional[str] = None
    issuer_ip: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    resource_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def durable_owner(self) -> Optional[str]:
        if self.expires_at is None:
            return self.owner_user_id
        return None

    def is_expired(self, now: datetime) -> bool:
        """Expired iff an expiry is set and lies strictly before *now*."""
        return self.expires_at is not None and self.expires_at < now
