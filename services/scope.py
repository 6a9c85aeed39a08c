"""
Access scope resolution.

A request is described by an explicit RequestContext built at the HTTP
boundary. ScopeResolver turns it into the ScopeKey that filters or tags every
document operation of that request:

- user/IP routes: a verified identity gives User(user_id); otherwise the
  caller is Anonymous(ip). IP scoping is best-effort isolation only: callers
  behind one NAT or proxy share a scope.
- token routes: always Token(token_id). Writes may register an unknown token
  value on first use; reads, updates and deletes need an existing token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from errors import AuthenticationError, InvalidTokenError
from schemas.models.document import (
    SCOPE_ANONYMOUS,
    SCOPE_TOKEN,
    SCOPE_USER,
    ScopeEntry,
)
from schemas.models.token import AccessTokenDoc
from services.token_service import TokenService


@dataclass(frozen=True)
class ScopeKey:
    kind: str
    value: str

    @classmethod
    def user(cls, user_id: str) -> "ScopeKey":
        return cls(SCOPE_USER, user_id)

    @classmethod
    def anonymous(cls, ip_address: str) -> "ScopeKey":
        return cls(SCOPE_ANONYMOUS, ip_address)

    @classmethod
    def token(cls, token_id: str) -> "ScopeKey":
        return cls(SCOPE_TOKEN, token_id)

    def to_entry(self) -> ScopeEntry:
        return ScopeEntry(kind=self.kind, value=self.value)


@dataclass(frozen=True)
class RequestContext:
    """Caller facts for one request; nothing is read from ambient state."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    roles: tuple[str, ...] = field(default_factory=tuple)
    ip: Optional[str] = None
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@dataclass(frozen=True)
class TokenScope:
    scope: ScopeKey
    access: AccessTokenDoc


class ScopeResolver:
    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def resolve(self, ctx: RequestContext) -> ScopeKey:
        """Scope for the user/IP route family."""
        if ctx.user_id is not None:
            return ScopeKey.user(ctx.user_id)
        if ctx.ip:
            return ScopeKey.anonymous(ctx.ip)
        raise AuthenticationError("Unable to determine the caller's address")

    async def resolve_token(self, ctx: RequestContext, *, provision: bool = False) -> TokenScope:
        """Scope for the token route family.

        Raises:
            InvalidTokenError: malformed value, or unknown value when not provisioning.
            TokenExpiredError: the token's expiry has passed.
            AuthenticationError: provisioning needs the caller's address and it is unknown.
        """
        if ctx.token is None:
            raise InvalidTokenError("An access token is required")

        access = await self._tokens.lookup_by_value(ctx.token)
        if access is None:
            if not provision:
                raise InvalidTokenError("Unknown access token")
            access = await self._tokens.provision(
                ctx.token, owner_user_id=ctx.user_id, issuer_ip=ctx.ip
            )
        self._tokens.validate_live(access)
        return TokenScope(scope=ScopeKey.token(access.id), access=access)
