"""
Integration fixtures.

create_app() is used as-is; only AsyncMongoClient is swapped for the
mongomock-backed fake so no network connections are made.
"""

import pytest
from fastapi.testclient import TestClient

from infrastructure.rate_limit import limiter


@pytest.fixture
def app_factory(monkeypatch, mongo_client, make_settings):
    import app as app_module

    monkeypatch.setattr(app_module, "AsyncMongoClient", lambda *a, **kw: mongo_client)
    limiter.reset()

    def _build(**settings_overrides):
        return app_module.create_app(make_settings(**settings_overrides))

    yield _build
    limiter.reset()


@pytest.fixture
def client(app_factory):
    with TestClient(app_factory()) as c:
        yield c


@pytest.fixture
def register_and_login(client):
    """Register an account and return Authorization headers for it."""

    def _login(email="ada@example.com", password="hello123"):
        resp = client.post("/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = client.post("/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}

    return _login
