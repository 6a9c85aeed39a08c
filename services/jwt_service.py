"""
JWT issuing and verification (PyJWT).

RS256 is used when a key pair is configured, HS256 with a shared secret
otherwise.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from config import JWTSettings


class JwtService:
    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings
        if settings.use_rs256:
            # Keys provided via env may carry literal \n sequences
            self._signing_key: Any = settings.jwt_private_key.replace("\\n", "\n")
            self._verify_key: Any = settings.jwt_public_key.replace("\\n", "\n")
            self._algorithm = "RS256"
        else:
            if not settings.jwt_secret:
                raise RuntimeError(
                    "JWT_SECRET must be set when RS256 keys are not provided"
                )
            self._signing_key = self._verify_key = settings.jwt_secret
            self._algorithm = "HS256"

    def generate_access_jwt(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        roles: Optional[list[str]] = None,
        auth_method: str = "pwd",
    ) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(user_id),
            "email": email,
            "roles": roles or [],
            "iat": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=self._settings.access_token_ttl_seconds)).timestamp()
            ),
            "amr": [auth_method],  # Authentication Methods References
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def verify_access_jwt(self, token: str) -> dict[str, Any]:
        """Decode *token*; raises jwt.InvalidTokenError (or a subclass) when invalid."""
        return jwt.decode(
            token,
            self._verify_key,
            algorithms=[self._algorithm],
            audience=self._settings.jwt_audience,
            issuer=self._settings.jwt_issuer,
            options={"require": ["exp", "sub"]},
        )
