"""
Stored document model.

Maps to the `documents` MongoDB collection. One collection holds every
client route; `route` and `scope` partition it.

`_id` is the canonical document id. The payload carries a mirror of it under
its own `_id` key for client convenience, but lookups only ever match the
outer field.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from schemas.models.base import MongoBaseModel


SCOPE_USER = "user"
SCOPE_ANONYMOUS = "ip"
SCOPE_TOKEN = "token"


class ScopeEntry(BaseModel):
    """Embedded owner of a document: one of user / ip / token."""

    kind: str
    value: str


class DataDoc(MongoBaseModel):
    """Document model for the `documents` collection."""

    route: str
    scope: ScopeEntry
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None
