"""
Random identifier generators — pure, side-effect-free functions.

Both identifiers are random (version 4) UUIDs in canonical hyphenated form;
``uuid4`` draws from ``os.urandom`` so token values are unguessable.
"""

from __future__ import annotations

import uuid


def generate_document_id() -> str:
    """Generate the server-side id assigned to a new document."""
    return str(uuid.uuid4())


def generate_token_value() -> str:
    """Generate a fresh access token value (canonical GUID shape)."""
    return str(uuid.uuid4())


def generate_record_id() -> str:
    """Generate the primary key for user and token records."""
    return str(uuid.uuid4())
