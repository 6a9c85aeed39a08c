"""
Access token lifecycle.

A token moves Unprovisioned -> Active (explicit issue, or first use on a
write) -> Expired (time based, one way). Expiry is evaluated lazily when the
token is used; nothing sweeps old tokens.

The configured trial token is a shared, well-known value whose document count
is capped. Hitting the cap stops writes only; reads keep working.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from pymongo.errors import DuplicateKeyError

from errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    QuotaExceededError,
    TokenExpiredError,
)
from repositories.token_repository import TokenRepository
from schemas.models.token import AccessTokenDoc
from shared.datetime_utils import utcnow
from shared.generators import generate_record_id, generate_token_value
from shared.logging import get_logger, hash_ip
from shared.validators import normalize_token_value

log = get_logger(__name__)


class TokenService:
    def __init__(
        self,
        repo: TokenRepository,
        *,
        trial_token: Optional[str] = None,
        trial_quota: int = 5,
        provisioned_ttl: timedelta = timedelta(days=1),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repo
        self._trial_token = normalize_token_value(trial_token) if trial_token else None
        self._trial_quota = trial_quota
        self._provisioned_ttl = provisioned_ttl
        self._clock = clock

    # ── Lookup & validation ─────────────────────────────────────────────────

    @staticmethod
    def parse_value(value: str) -> str:
        """Canonical form of a presented token value.

        Malformed values fail here, before any store round-trip.
        """
        normalized = normalize_token_value(value)
        if normalized is None:
            raise InvalidTokenError("Access token is not a valid GUID")
        return normalized

    async def lookup_by_value(self, value: str) -> Optional[AccessTokenDoc]:
        return await self._repo.find_by_value(self.parse_value(value))

    def validate_live(self, access: AccessTokenDoc) -> None:
        if access.is_expired(self._clock()):
            log.info("token_expired", access_id=access.id)
            raise TokenExpiredError("Access token has expired")

    def is_trial(self, access: AccessTokenDoc) -> bool:
        return self._trial_token is not None and access.token == self._trial_token

    # ── Creation ────────────────────────────────────────────────────────────

    async def issue(self, owner_user_id: str, issuer_ip: Optional[str]) -> AccessTokenDoc:
        """Issue a durable (non-expiring) token for *owner_user_id*.

        Raises:
            ConflictError: the user already holds a non-expiring token.
            AuthenticationError: the caller's address is unknown.
        """
        if not issuer_ip:
            raise AuthenticationError("Unable to determine the caller's address")
        if await self._repo.find_durable_for_user(owner_user_id) is not None:
            raise ConflictError("User already has an access token")

        access = AccessTokenDoc(
            _id=generate_record_id(),
            token=generate_token_value(),
            owner_user_id=owner_user_id,
            issuer_ip=issuer_ip,
            created_at=self._clock(),
            expires_at=None,
        )
        try:
            await self._repo.insert(access)
        except DuplicateKeyError:
            # A concurrent request issued this user's token first
            raise ConflictError("User already has an access token") from None
        log.info("token_issued", access_id=access.id, user_id=owner_user_id)
        return access

    async def get_or_issue(
        self, owner_user_id: str, issuer_ip: Optional[str]
    ) -> AccessTokenDoc:
        existing = await self._repo.find_durable_for_user(owner_user_id)
        if existing is not None:
            return existing
        try:
            return await self.issue(owner_user_id, issuer_ip)
        except ConflictError:
            winner = await self._repo.find_durable_for_user(owner_user_id)
            if winner is None:
                raise
            return winner

    async def provision(
        self,
        value: str,
        *,
        owner_user_id: Optional[str],
        issuer_ip: Optional[str],
    ) -> AccessTokenDoc:
        """Register *value* on first use.

        Ordinary tokens expire after the provisioning TTL; the trial token is
        shared by everyone, so it never expires and has no owner.
        """
        canonical = self.parse_value(value)
        if not issuer_ip:
            raise AuthenticationError("Unable to determine the caller's address")

        now = self._clock()
        trial = canonical == self._trial_token
        access = AccessTokenDoc(
            _id=generate_record_id(),
            token=canonical,
            owner_user_id=None if trial else owner_user_id,
            issuer_ip=issuer_ip,
            created_at=now,
            expires_at=None if trial else now + self._provisioned_ttl,
        )
        try:
            await self._repo.insert(access)
        except DuplicateKeyError:
            # Another request registered the same value first
            winner = await self._repo.find_by_value(canonical)
            if winner is None:
                raise
            return winner

        log.info(
            "token_provisioned",
            access_id=access.id,
            trial=trial,
            ip_hash=hash_ip(issuer_ip),
        )
        return access

    # ── Quota ───────────────────────────────────────────────────────────────

    async def record_use(self, access: AccessTokenDoc) -> AccessTokenDoc:
        """Count one created document against *access*.

        Raises:
            QuotaExceededError: the trial token is at its cap; nothing is counted.
        """
        cap = self._trial_quota if self.is_trial(access) else None
        updated = await self._repo.increment_usage(access.id, cap=cap)
        if updated is None:
            log.warning("quota_exceeded", access_id=access.id, quota=cap)
            raise QuotaExceededError(
                f"Trial access is limited to {self._trial_quota} resources"
            )
        return updated

    async def release_use(self, access: AccessTokenDoc) -> None:
        """Undo a record_use whose document was never stored."""
        await self._repo.decrement_usage(access.id)
