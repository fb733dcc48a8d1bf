from __future__ import annotations

from datetime import timedelta

import mongomock
import pytest
from mongoengine import connect, disconnect

from app.models.user import User
from app.utils.config import settings
from app.utils.security import TokenConfig


TEST_SECRET = "test-signing-secret"


@pytest.fixture
def mongo():
    """In-memory MongoDB bound to the default mongoengine alias."""
    disconnect(alias="default")
    connect(
        "property_app_test",
        host="mongodb://localhost",
        alias="default",
        mongo_client_class=mongomock.MongoClient,
        tz_aware=True,
    )
    User.ensure_indexes()
    yield
    User.drop_collection()
    disconnect(alias="default")


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(secret_key=TEST_SECRET, algorithm="HS256", expires_in=timedelta(hours=2))


@pytest.fixture
def jwt_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "jwt_secret", TEST_SECRET)
    monkeypatch.setattr(settings, "jwt_algorithm", "HS256")
    monkeypatch.setattr(settings, "jwt_expire", timedelta(hours=2))
    return settings
