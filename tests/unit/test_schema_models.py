"""Unit tests for MongoDB document models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from schemas.models.base import MongoBaseModel
from schemas.models.document import SCOPE_TOKEN, DataDoc, ScopeEntry
from schemas.models.token import AccessTokenDoc
from schemas.models.user import ROLE_SUPER_ADMIN, UserDoc


# ── Helpers ───────────────────────────────────────────────────────────────────

def now():
    return datetime.now(timezone.utc)


# ── MongoBaseModel ─────────────────────────────────────────────────────────────

class TestMongoBaseModel:
    def test_from_mongo_none(self):
        assert MongoBaseModel.from_mongo(None) is None

    def test_to_mongo_renames_id(self):
        data = MongoBaseModel(_id="abc").to_mongo()
        assert data == {"_id": "abc"}

    def test_to_mongo_drops_missing_id(self):
        assert "_id" not in MongoBaseModel().to_mongo()

    def test_populate_by_name(self):
        assert MongoBaseModel(id="abc").id == "abc"


# ── DataDoc ───────────────────────────────────────────────────────────────────

class TestDataDoc:
    def _raw(self, **overrides):
        raw = {
            "_id": "doc-1",
            "route": "todos",
            "scope": {"kind": SCOPE_TOKEN, "value": "tok-1"},
            "payload": {"_id": "doc-1", "title": "milk"},
            "created_at": datetime(2024, 1, 1, 12, 0),
        }
        raw.update(overrides)
        return raw

    def test_from_mongo(self):
        doc = DataDoc.from_mongo(self._raw())
        assert doc.id == "doc-1"
        assert doc.scope == ScopeEntry(kind=SCOPE_TOKEN, value="tok-1")
        assert doc.payload["title"] == "milk"
        assert doc.updated_at is None

    def test_naive_datetimes_become_utc(self):
        doc = DataDoc.from_mongo(self._raw())
        assert doc.created_at.tzinfo == timezone.utc

    def test_roundtrip_keeps_nested_scope(self):
        data = DataDoc.from_mongo(self._raw()).to_mongo()
        assert data["scope"] == {"kind": SCOPE_TOKEN, "value": "tok-1"}
        assert data["_id"] == "doc-1"

    def test_payload_order_preserved(self):
        payload = {"_id": "doc-1", "z": 1, "a": 2}
        doc = DataDoc.from_mongo(self._raw(payload=payload))
        assert list(doc.to_mongo()["payload"]) == ["_id", "z", "a"]

    def test_scope_required(self):
        raw = self._raw()
        raw.pop("scope")
        with pytest.raises(PydanticValidationError):
            DataDoc.from_mongo(raw)


# ── AccessTokenDoc ────────────────────────────────────────────────────────────

class TestAccessTokenDoc:
    def _token(self, **kw):
        base = dict(
            _id="t1",
            token="3f2504e0-4f89-41d3-9a0c-0305e82c3301",
            issuer_ip="1.2.3.4",
            created_at=now(),
        )
        base.update(kw)
        return AccessTokenDoc(**base)

    def test_defaults(self):
        t = self._token()
        assert t.expires_at is None
        assert t.owner_user_id is None
        assert t.resource_count == 0

    def test_no_expiry_never_expires(self):
        assert self._token().is_expired(now() + timedelta(days=3650)) is False

    @pytest.mark.parametrize(
        "offset, expired",
        [(timedelta(seconds=-1), True), (timedelta(0), False), (timedelta(seconds=1), False)],
        ids=["past", "exactly_now", "future"],
    )
    def test_expiry_boundary(self, offset, expired):
        ref = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert self._token(expires_at=ref + offset).is_expired(ref) is expired

    def test_negative_count_rejected(self):
        with pytest.raises(PydanticValidationError):
            self._token(resource_count=-1)


# ── UserDoc ───────────────────────────────────────────────────────────────────

class TestUserDoc:
    def _user(self, **kw):
        base = dict(_id="u1", email="a@example.com", password_hash="$argon2id$x")
        base.update(kw)
        return UserDoc(**base)

    def test_defaults(self):
        u = self._user()
        assert u.is_enabled is True
        assert u.is_super_user is False
        assert u.roles == []

    def test_super_user_role(self):
        assert self._user(is_super_user=True).roles == [ROLE_SUPER_ADMIN]

    @pytest.mark.parametrize(
        "first, last, expected",
        [("Ada", "Lovelace", "Ada Lovelace"), ("Ada", None, "Ada"), (None, None, None)],
        ids=["both", "first_only", "none"],
    )
    def test_full_name(self, first, last, expected):
        assert self._user(first_name=first, last_name=last).full_name == expected
