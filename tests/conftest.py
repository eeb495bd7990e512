"""Pytest configuration and fixtures for redicache.

Unit tests run against tests.fakes.FakeRedis injected into a session;
tests/integration talks to a real server and skips when none answers.
"""

import pytest

from redicache.core.config import RedisConfig
from redicache.infrastructure.cache.redis_cache import RedisSession, init_session
from tests.fakes import FakeRedis, OrderLine, SampleRecord


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Fresh in-memory Redis per test."""
    return FakeRedis()


@pytest.fixture
def config() -> RedisConfig:
    """Session settings with the test: prefix and debug diagnostics on."""
    return RedisConfig(
        _env_file=None,
        db=4,
        key_prefix="test:",
        expiration_in_minutes=10,
        debug=True,
    )


@pytest.fixture
async def session(config: RedisConfig, fake_redis: FakeRedis) -> RedisSession:
    """Connected session with SampleRecord and OrderLine registered."""
    s = await init_session(config, redis_client=fake_redis)
    s.register_candidate(SampleRecord(), "test item for cache")
    s.register_candidate(OrderLine(), "order lines per customer and order")
    yield s
    await s.close()
