"""
Response DTOs for identity endpoints.

UserProfileResponse — GET /me, PUT /me, POST /register (201)
LoginResponse       — POST /login  (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.user import UserDoc


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    full_name: Optional[str] = Field(default=None, alias="fullName")
    profile_image_url: Optional[str] = Field(default=None, alias="profileImageUrl")
    join_date: Optional[datetime] = Field(default=None, alias="joinDate")
    last_login_at: Optional[datetime] = Field(default=None, alias="lastLoginAt")
    roles: list[str] = []

    @classmethod
    def from_user(cls, user: UserDoc) -> "UserProfileResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            profile_image_url=user.profile_image_url,
            join_date=user.join_date,
            last_login_at=user.last_login_at,
            roles=user.roles,
        )


class LoginResponse(BaseModel):
    """Response body for POST /login (200)."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    token_type: str = Field(default="Bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn")
