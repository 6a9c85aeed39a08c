"""
User document model.

Maps to the `users` MongoDB collection. Email is stored trimmed and
lower-cased and carries a unique index.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel


ROLE_SUPER_ADMIN = "SuperAdmin"


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    email: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    join_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    is_super_user: bool = False
    is_enabled: bool = True

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None

    @property
    def roles(self) -> list[str]:
        return [ROLE_SUPER_ADMIN] if self.is_super_user else []
