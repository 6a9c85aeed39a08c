"""
Unit tests for the shared/ utility modules.

Covers:
- shared.validators      (normalize_route, normalize_token_value,
                          validate_email, validate_password)
- shared.payload         (parse_payload incl. float overflow and nesting depth,
                          with_id, merge_payload, utf16_length)
- shared.generators      (generate_document_id, generate_token_value)
- shared.datetime_utils  (utcnow, as_utc)
- shared.ip_utils        (get_client_ip)
- shared.crypto          (hash_password, verify_password)
- shared.logging         (redact_sensitive_fields, hash_ip)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

import shared.logging as shared_logging
from errors import PayloadTooLargeError, ValidationError
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import as_utc, utcnow
from shared.generators import generate_document_id, generate_token_value
from shared.ip_utils import get_client_ip
from shared.payload import MAX_DEPTH, merge_payload, parse_payload, utf16_length, with_id
from shared.validators import (
    normalize_route,
    normalize_token_value,
    validate_email,
    validate_password,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_request(headers: dict, client_host: str | None = "10.0.0.1") -> MagicMock:
    """Minimal mock of a FastAPI Request."""
    req = MagicMock()
    req.headers = headers
    if client_host is None:
        req.client = None
    else:
        req.client = MagicMock()
        req.client.host = client_host
    return req


# ---------------------------------------------------------------------------
# shared.validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "route, expected",
    [("Users", "users"), ("  Todo  ", "todo"), ("   ", ""), ("notes", "notes")],
    ids=["upper", "padded", "blank", "plain"],
)
def test_normalize_route(route, expected):
    assert normalize_route(route) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3F2504E0-4F89-41D3-9A0C-0305E82C3301", "3f2504e0-4f89-41d3-9a0c-0305e82c3301"),
        ("{3f2504e0-4f89-41d3-9a0c-0305e82c3301}", "3f2504e0-4f89-41d3-9a0c-0305e82c3301"),
        ("3f2504e04f8941d39a0c0305e82c3301", "3f2504e0-4f89-41d3-9a0c-0305e82c3301"),
        ("not-a-guid", None),
        ("", None),
        ("3f2504e0-4f89-41d3-9a0c", None),
    ],
    ids=["upper", "braced", "bare_hex", "garbage", "empty", "truncated"],
)
def test_normalize_token_value(value, expected):
    assert normalize_token_value(value) == expected


@pytest.mark.parametrize(
    "email, expected",
    [("user@example.com", True), ("no-at-sign", False), ("a@b", False)],
    ids=["valid", "missing_at", "missing_tld"],
)
def test_validate_email(email, expected):
    assert validate_email(email) is expected


@pytest.mark.parametrize(
    "password, valid",
    [
        ("hello123", True),
        ("Passw0rd!", True),
        ("hi1", False),  # too short
        ("12345678", False),  # no letter
        ("password", False),  # no digit
        ("a1" * 65, False),  # too long
        ("", False),
    ],
    ids=["ok", "ok_special", "too_short", "no_letter", "no_digit", "too_long", "empty"],
)
def test_validate_password(password, valid):
    assert (validate_password(password) == []) is valid


def test_validate_password_lists_each_missing_rule():
    missing = validate_password("abc")
    assert "At least 8 characters" in missing
    assert "At least one number" in missing


# ---------------------------------------------------------------------------
# shared.payload
# ---------------------------------------------------------------------------


class TestParsePayload:
    def test_object_keeps_key_order(self):
        data = parse_payload(b'{"b": 1, "a": {"z": [1, 2]}, "c": null}', 100)
        assert list(data) == ["b", "a", "c"]
        assert data["a"] == {"z": [1, 2]}

    @pytest.mark.parametrize(
        "raw",
        [
            b"[1, 2]",
            b'"text"',
            b"42",
            b"null",
            b"{not json",
            b"",
            b'{"x": NaN}',
            b'{"x": Infinity}',
            b'{"x": 9223372036854775808}',
            b"\xff\xfe{}",
            b'{"x": "\\ud800"}',
            b'{"a\\u0000b": 1}',
        ],
        ids=[
            "array",
            "string",
            "number",
            "null",
            "invalid_json",
            "empty",
            "nan",
            "infinity",
            "int64_overflow",
            "invalid_utf8",
            "lone_surrogate",
            "nul_in_key",
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(ValidationError):
            parse_payload(raw, 1000)

    def test_int64_bounds_accepted(self):
        data = parse_payload(b'{"max": 9223372036854775807, "min": -9223372036854775808}', 100)
        assert data["max"] == 2**63 - 1

    def test_exactly_at_limit_is_accepted(self):
        raw = b'{"k": "' + b"x" * 10 + b'"}'
        assert parse_payload(raw, len(raw)) == {"k": "x" * 10}

    def test_one_over_limit_is_rejected(self):
        raw = b'{"k": "' + b"x" * 10 + b'"}'
        with pytest.raises(PayloadTooLargeError):
            parse_payload(raw, len(raw) - 1)

    def test_limit_counts_utf16_units_not_bytes(self):
        # "é" is two UTF-8 bytes but one UTF-16 unit
        raw = '{"k": "éééé"}'.encode("utf-8")
        assert parse_payload(raw, 13) == {"k": "éééé"}

    def test_huge_body_rejected_before_decoding(self):
        with pytest.raises(PayloadTooLargeError):
            parse_payload(b"\xff" * 400, 100)

    @pytest.mark.parametrize(
        "raw",
        [b'{"x": 1e400}', b'{"x": [-1e400]}', b'{"x": {"y": 1e999}}'],
        ids=["positive", "negative_in_list", "nested"],
    )
    def test_float_overflow_rejected(self, raw):
        with pytest.raises(ValidationError, match="out of range"):
            parse_payload(raw, 1000)

    def test_ordinary_floats_accepted(self):
        assert parse_payload(b'{"x": 1.5e300, "y": -0.25}', 100) == {"x": 1.5e300, "y": -0.25}


def _nested(levels: int) -> bytes:
    # The outer object is one level, each array adds one
    return b'{"a": ' + b"[" * levels + b"]" * levels + b"}"


class TestPayloadNesting:
    def test_deepest_storable_payload_accepted(self):
        data = parse_payload(_nested(MAX_DEPTH - 1), 50_000)
        assert "a" in data

    def test_one_level_too_deep(self):
        with pytest.raises(ValidationError, match="nesting"):
            parse_payload(_nested(MAX_DEPTH), 50_000)

    def test_nesting_beyond_decoder_limit(self):
        raw = _nested(20_000)
        assert len(raw) < 50_000
        with pytest.raises(ValidationError):
            parse_payload(raw, 50_000)


def test_utf16_length_counts_astral_twice():
    assert utf16_length("a") == 1
    assert utf16_length("\U0001F600") == 2


def test_with_id_puts_server_id_first_and_drops_client_id():
    payload = with_id("srv", {"name": "x", "_id": "client"})
    assert list(payload) == ["_id", "name"]
    assert payload["_id"] == "srv"


def test_merge_payload_overwrites_and_preserves():
    existing = {"_id": "1", "a": 1, "b": 2}
    merged = merge_payload(existing, {"b": 3, "c": 4, "_id": "other"})
    assert merged == {"_id": "1", "a": 1, "b": 3, "c": 4}
    assert existing == {"_id": "1", "a": 1, "b": 2}


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("fn", [generate_document_id, generate_token_value])
def test_generators_produce_canonical_uuid4(fn):
    value = fn()
    parsed = uuid.UUID(value)
    assert str(parsed) == value
    assert parsed.version == 4


def test_generators_are_unique():
    assert len({generate_token_value() for _ in range(50)}) == 50


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


def test_as_utc_assumes_naive_is_utc():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_as_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = as_utc(datetime(2024, 1, 1, 14, 0, tzinfo=plus_two))
    assert value == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert value.tzinfo == timezone.utc


def test_as_utc_none():
    assert as_utc(None) is None


def test_utcnow_is_aware():
    assert utcnow().tzinfo == timezone.utc


# ---------------------------------------------------------------------------
# shared.ip_utils — get_client_ip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"CF-Connecting-IP": "1.1.1.1"}, "1.1.1.1"),
        ({"X-Forwarded-For": "2.2.2.2, 3.3.3.3"}, "2.2.2.2"),
        ({"X-Real-IP": "4.4.4.4"}, "4.4.4.4"),
        ({}, "10.0.0.1"),
    ],
    ids=["cloudflare", "forwarded_first", "real_ip", "direct"],
)
def test_get_client_ip_trusting_proxies(headers, expected):
    req = _make_request(headers)
    assert get_client_ip(req, trust_proxy_headers=True) == expected


def test_get_client_ip_ignores_proxy_headers_by_default():
    req = _make_request({"X-Forwarded-For": "2.2.2.2"})
    assert get_client_ip(req) == "10.0.0.1"


def test_get_client_ip_none_without_peer():
    assert get_client_ip(_make_request({}, client_host=None)) is None


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


class TestPasswordHashing:
    def test_roundtrip(self):
        h = hash_password("hello123")
        assert h.startswith("$argon2id$")
        assert verify_password("hello123", h) is True

    def test_wrong_password(self):
        assert verify_password("nope1234", hash_password("hello123")) is False

    def test_garbage_hash(self):
        assert verify_password("hello123", "not-a-hash") is False


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


def test_redact_sensitive_fields():
    event = {
        "event": "login_failed",
        "password": "hunter2",
        "jwt_token": "abc",
        "api_key": "k",
        "user_id": "u1",
    }
    out = shared_logging.redact_sensitive_fields(None, "info", event)
    assert out["password"] == "***REDACTED***"
    assert out["jwt_token"] == "***REDACTED***"
    assert out["api_key"] == "***REDACTED***"
    assert out["user_id"] == "u1"
    assert out["event"] == "login_failed"


def test_hash_ip_only_in_production(monkeypatch):
    monkeypatch.setattr(shared_logging, "_hash_ips", False)
    assert shared_logging.hash_ip("1.2.3.4") == "1.2.3.4"
    monkeypatch.setattr(shared_logging, "_hash_ips", True)
    hashed = shared_logging.hash_ip("1.2.3.4")
    assert hashed != "1.2.3.4"
    assert len(hashed) == 16
    assert shared_logging.hash_ip(None) is None
