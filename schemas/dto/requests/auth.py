"""
Request DTOs for identity endpoints.

LoginRequest           — POST /login
RegisterRequest        — POST /register
ChangePasswordRequest  — POST /change-password
UpdateProfileRequest   — PUT /me
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    first_name: str | None = Field(default=None, alias="firstName", max_length=100)
    last_name: str | None = Field(default=None, alias="lastName", max_length=100)
    profile_image_url: str | None = Field(
        default=None, alias="profileImageUrl", max_length=2048
    )


class ChangePasswordRequest(BaseModel):
    """Request body for POST /change-password.

    ``password`` is the current password; the new one must be typed twice.
    """

    model_config = ConfigDict(populate_by_name=True)

    password: str
    new_password: str = Field(alias="newPassword")
    repeat_password: str = Field(alias="repeatPassword")


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /me. Omitted fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(default=None, alias="firstName", max_length=100)
    last_name: str | None = Field(default=None, alias="lastName", max_length=100)
    profile_image_url: str | None = Field(
        default=None, alias="profileImageUrl", max_length=2048
    )
