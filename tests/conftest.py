import fakeredis
import pytest

from leadflow.settings import settings

# Every module that binds get_redis at import time
REDIS_CALLERS = (
    "leadflow.store.form_repo",
    "leadflow.store.records",
    "leadflow.utils.lock",
)


@pytest.fixture
def fake_redis(monkeypatch):
    """Point every Redis caller at one in-memory fakeredis instance."""
    client = fakeredis.FakeRedis(decode_responses=True)
    for mod in REDIS_CALLERS:
        monkeypatch.setattr(f"{mod}.get_redis", lambda: client)
    try:
        yield client
    finally:
        client.flushall()


@pytest.fixture
def capacity(monkeypatch):
    """Small, explicit product bounds so tests do not depend on the environment."""
    monkeypatch.setattr(settings, "MINIMUM_PRODUCTS", 3)
    monkeypatch.setattr(settings, "MAXIMUM_PRODUCTS", 5)
    return settings
