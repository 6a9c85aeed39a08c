"""Response DTO for GET /api/token."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.token import AccessTokenDoc


class AccessTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    created_at: datetime = Field(alias="createdAt")
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")
    resource_count: int = Field(alias="resourceCount")

    @classmethod
    def from_doc(cls, access: AccessTokenDoc) -> "AccessTokenResponse":
        return cls(
            token=access.token,
            created_at=access.created_at,
            expires_at=access.expires_at,
            resource_count=access.resource_count,
        )
