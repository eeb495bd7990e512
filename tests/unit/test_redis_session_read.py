"""RedisSession read path: raw get, typed scans, expiry."""

from datetime import timedelta

import pytest

from redicache.domain.exceptions import (
    BackendError,
    DeserializationError,
    InvalidArgumentError,
    KeyNotFoundError,
)
from redicache.infrastructure.cache.redis_cache import RedisSession
from tests.fakes import FakeRedis, OrderLine, PlainRecord, SampleRecord


async def test_set_then_get_scan_round_trip(session: RedisSession) -> None:
    """Record written with set() reads back equal through get_scan()."""
    await session.set(SampleRecord(id=1, name="AAA"), "p1", "p2")

    dest = await session.get_scan("p1", "p2", SampleRecord())
    assert isinstance(dest, SampleRecord)
    assert dest.id == 1
    assert dest.name == "AAA"


async def test_get_scan_by_key(session: RedisSession) -> None:
    record = SampleRecord(id=1, name="AAA")
    await session.set(record, "p1", "p2")

    key = record.derive_key("p1", "p2")
    assert await session.get_scan_by_key(key, SampleRecord) == record


async def test_round_trip_with_custom_expiration(
    session: RedisSession, fake_redis: FakeRedis
) -> None:
    record = SampleRecord(id=5, name="EEE")
    await session.set_with_expiration(record, timedelta(seconds=20), "a", "b")

    fake_redis.advance(19)
    assert await session.get_scan("a", "b", SampleRecord()) == record
    fake_redis.advance(2)
    with pytest.raises(KeyNotFoundError):
        await session.get_scan("a", "b", SampleRecord())


async def test_get_scan_slice(session: RedisSession) -> None:
    lines = [OrderLine("A-1", 2), OrderLine("B-7", 1)]
    await session.set_slice(lines, "cust-1", "ord-9", OrderLine())

    assert await session.get_scan_slice("cust-1", "ord-9", OrderLine()) == lines
    assert await session.get_scan("cust-1", "ord-9", OrderLine(), into=list[OrderLine]) == lines


async def test_reads_do_not_check_registration(config, fake_redis: FakeRedis) -> None:
    """Data written earlier stays readable from a session that never registered the type."""
    await fake_redis.set("test:TEST:KEY:p2", '{"ID": 9, "Name": "ZZZ"}')
    reader = RedisSession(config, redis_client=fake_redis)

    dest = await reader.get_scan("p1", "p2", SampleRecord())
    assert dest == SampleRecord(id=9, name="ZZZ")


async def test_get_raw(session: RedisSession) -> None:
    await session.set_str("hello", "greet", timedelta(minutes=1))
    assert await session.get("greet") == "hello"


async def test_get_after_ttl_elapses(session: RedisSession, fake_redis: FakeRedis) -> None:
    """After the TTL the key is gone and get() fails with a not-found BackendError."""
    await session.set_str("hello", "greet", timedelta(minutes=1))
    fake_redis.advance(61)

    with pytest.raises(BackendError) as exc_info:
        await session.get("greet")
    assert isinstance(exc_info.value, KeyNotFoundError)
    assert exc_info.value.key == "test:greet"


async def test_get_missing_key(session: RedisSession) -> None:
    with pytest.raises(KeyNotFoundError):
        await session.get("nothing-here")


async def test_get_scan_bad_payload(session: RedisSession, fake_redis: FakeRedis) -> None:
    await fake_redis.set("test:TEST:KEY:p2", "{broken")
    with pytest.raises(DeserializationError) as exc_info:
        await session.get_scan("p1", "p2", SampleRecord())
    assert exc_info.value.details["key"] == "test:TEST:KEY:p2"


async def test_get_scan_plain_class_fails_deserialization(
    session: RedisSession, fake_redis: FakeRedis
) -> None:
    """Reading into a type pydantic cannot build a schema for is a DeserializationError."""
    await fake_redis.set("test:PLAIN:a:b", '{"value": "v"}')
    with pytest.raises(DeserializationError) as exc_info:
        await session.get_scan("a", "b", PlainRecord())
    assert exc_info.value.details["type"] == "PlainRecord"
    assert exc_info.value.details["key"] == "test:PLAIN:a:b"


async def test_get_scan_requires_exemplar(session: RedisSession) -> None:
    with pytest.raises(InvalidArgumentError):
        await session.get_scan("p1", "p2", None)
