"""
Shared test fixtures.
"""

import os

import pytest

from tests.fakes import JWT_SECRET, TRIAL_TOKEN, FakeAsyncMongoClient, StepClock

# Ensure a MONGODB_URI is present so AppSettings can be instantiated
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")


@pytest.fixture
def mongo_client():
    return FakeAsyncMongoClient()


@pytest.fixture
def db(mongo_client):
    return mongo_client["crudy_test"]


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def make_settings():
    from config import (
        AppSettings,
        DatabaseSettings,
        JWTSettings,
        LoggingSettings,
        RateLimitSettings,
        SentrySettings,
        StoreSettings,
    )

    def _make(*, ratelimit_enabled=False, **store_overrides):
        store = {"trial_token": TRIAL_TOKEN}
        store.update(store_overrides)
        return AppSettings(
            env="test",
            db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/", db_name="crudy_test"),
            jwt=JWTSettings(jwt_secret=JWT_SECRET, jwt_private_key="", jwt_public_key=""),
            store=StoreSettings(**store),
            rate_limit=RateLimitSettings(ratelimit_enabled=ratelimit_enabled),
            logging=LoggingSettings(log_level="WARNING", log_format="console"),
            sentry=SentrySettings(sentry_dsn=""),
        )

    return _make
