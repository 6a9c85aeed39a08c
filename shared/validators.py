"""
Input validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

import re
import uuid
from typing import Optional

import validators as _validators

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def normalize_route(route: str) -> str:
    """Return the collection discriminator for *route*: trimmed and lower-cased.

    ``"/Users "`` and ``"users"`` address the same collection.
    """
    return route.strip().lower()


def normalize_token_value(value: str) -> Optional[str]:
    """Return *value* as a canonical lower-case hyphenated GUID, or ``None``.

    Accepts the spellings ``uuid.UUID`` understands (hyphenated, bare hex,
    braced, ``urn:uuid:``) so each GUID maps to exactly one token.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid address."""
    return _validators.email(email) is True


def validate_password(password: str) -> list[str]:
    """Check *password* against the account password policy.

    Returns:
        The unmet requirements; an empty list means the password is valid.
    """
    if not password:
        return ["Password is required"]

    missing = []
    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        missing.append(f"Maximum {PASSWORD_MAX_LENGTH} characters")
    if not re.search(r"[A-Za-z]", password):
        missing.append("At least one letter")
    if not re.search(r"[0-9]", password):
        missing.append("At least one number")
    return missing
