"""
Account management: registration, login, password change and profile.

Login answers with a bearer JWT whose ``sub`` is the stable user id the
document store scopes by.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from pymongo.errors import DuplicateKeyError

from errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from services.jwt_service import JwtService
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import utcnow
from shared.generators import generate_record_id
from shared.logging import get_logger
from shared.validators import normalize_email, validate_email, validate_password

log = get_logger(__name__)

_BAD_CREDENTIALS = "Email or password is incorrect"


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        jwt_service: JwtService,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._jwt = jwt_service
        self._clock = clock

    @staticmethod
    def _checked_email(email: str) -> str:
        email = normalize_email(email)
        if not validate_email(email):
            raise ValidationError("Email format is incorrect", field="email")
        return email

    @staticmethod
    def _checked_password(password: str, field: str = "password") -> None:
        missing = validate_password(password)
        if missing:
            raise ValidationError(
                "Password does not meet requirements", field=field, details=missing
            )

    async def register(
        self,
        email: str,
        password: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> UserDoc:
        email = self._checked_email(email)
        self._checked_password(password)

        if await self._users.find_by_email(email) is not None:
            log.warning("registration_failed", reason="email_exists")
            raise ConflictError("Email already registered", field="email")

        now = self._clock()
        user = UserDoc(
            _id=generate_record_id(),
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
            join_date=now,
            updated_at=now,
        )
        try:
            await self._users.insert(user)
        except DuplicateKeyError:
            # Email was registered between our check and insert
            log.warning("registration_failed", reason="race_condition_duplicate")
            raise ConflictError("Email already registered", field="email") from None

        log.info("user_registered", user_id=user.id)
        return user

    async def login(self, email: str, password: str) -> str:
        """Verify credentials and return a signed access JWT."""
        email = self._checked_email(email)
        user = await self._users.find_by_email(email)
        if user is None:
            log.warning("login_failed", reason="invalid_credentials")
            raise AuthenticationError(_BAD_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            log.warning("login_failed", reason="invalid_password", user_id=user.id)
            raise AuthenticationError(_BAD_CREDENTIALS)
        if not user.is_enabled:
            log.warning("login_failed", reason="disabled", user_id=user.id)
            raise AuthenticationError("Account is disabled")

        await self._users.record_login(user.id, self._clock())
        log.info("login_success", user_id=user.id, auth_method="password")
        return self._jwt.generate_access_jwt(user.id, email=user.email, roles=user.roles)

    async def change_password(
        self, user_id: str, password: str, new_password: str, repeat_password: str
    ) -> None:
        if new_password.strip() != repeat_password.strip():
            raise ValidationError(
                "New password and repeat password should be same.", field="repeat_password"
            )
        self._checked_password(new_password, field="new_password")

        user = await self.get_user(user_id)
        if not verify_password(password, user.password_hash):
            log.warning("password_change_failed", reason="invalid_password", user_id=user_id)
            raise ValidationError("Old password is incorrect", field="password")

        await self._users.update_fields(
            user_id,
            {"password_hash": hash_password(new_password), "updated_at": self._clock()},
        )
        log.info("password_changed", user_id=user_id)

    async def get_user(self, user_id: str) -> UserDoc:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: str, fields: dict) -> UserDoc:
        """Set the given profile fields; only first/last name and image URL are writable."""
        allowed = {"first_name", "last_name", "profile_image_url"}
        changes = {k: v for k, v in fields.items() if k in allowed}
        if changes:
            changes["updated_at"] = self._clock()
            if not await self._users.update_fields(user_id, changes):
                raise NotFoundError("User not found")
        return await self.get_user(user_id)
