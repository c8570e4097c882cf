import asyncio

import pytest

from productivity.cache.client import CacheManager, CacheTTL, MemoryCacheClient
from productivity.config import Settings
from productivity.database.db import init_db
from productivity.identity import SessionIdentity
from productivity.services.container import build_services


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenCacheClient:
    """Cache client whose every call fails."""

    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl):
        raise ConnectionError("cache down")

    async def delete(self, key):
        raise ConnectionError("cache down")

    async def invalidate_pattern(self, pattern):
        raise ConnectionError("cache down")


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "productivity.db"
    asyncio.run(init_db(path))
    return str(path)


@pytest.fixture
def identity():
    return SessionIdentity()


@pytest.fixture
def cache_client():
    return MemoryCacheClient()


@pytest.fixture
def cache(cache_client):
    return CacheManager(cache_client, CacheTTL(Settings()))


@pytest.fixture
def services(db_path, identity, cache):
    return build_services(db_path, identity, cache)


@pytest.fixture
def run(identity):
    """Run a coroutine to completion with ``user`` as the authenticated owner."""

    def _run(coro, user="alice"):
        with identity.session(user):
            return asyncio.run(coro)

    return _run
