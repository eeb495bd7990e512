"""In-memory stand-ins used by the unit tests.

FakeRedis implements the subset of redis.asyncio.Redis that RedisSession
calls, with TTLs driven by a manual clock (advance()). The record types
are small cache candidates: a pydantic model with aliased fields and a
dataclass.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field
from redis.exceptions import ResponseError


class FakeRedis:
    """Async in-memory Redis with string values, TTL and glob KEYS."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self.now = 0.0
        self.closed = False
        self.ping_calls = 0

    def advance(self, seconds: float) -> None:
        """Move the clock forward; keys past their TTL disappear."""
        self.now += seconds

    def _alive(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.now >= expires_at:
            del self._data[key]
            return None
        return value

    def ttl_of(self, key: str) -> float | None:
        """Seconds left for key, or None when it has no TTL (test helper)."""
        entry = self._data.get(key)
        if entry is None or entry[1] is None:
            return None
        return entry[1] - self.now

    async def ping(self) -> bool:
        self.ping_calls += 1
        return True

    async def get(self, key: str) -> str | None:
        return self._alive(key)

    async def set(
        self,
        key: str,
        value: str | int,
        ex: int | None = None,
        px: int | None = None,
    ) -> bool:
        expires_at = None
        if px is not None:
            expires_at = self.now + px / 1000
        elif ex is not None:
            expires_at = self.now + ex
        self._data[key] = (str(value), expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        count = 0
        for key in keys:
            if self._alive(key) is not None:
                del self._data[key]
                count += 1
        return count

    async def keys(self, pattern: str = "*") -> list[str]:
        return [
            k
            for k in list(self._data)
            if self._alive(k) is not None and fnmatch.fnmatchcase(k, pattern)
        ]

    async def incrby(self, key: str, amount: int = 1) -> int:
        current = self._alive(key)
        try:
            value = int(current) if current is not None else 0
        except ValueError as e:
            raise ResponseError("value is not an integer or out of range") from e
        value += amount
        expires_at = self._data[key][1] if current is not None else None
        self._data[key] = (str(value), expires_at)
        return value

    async def incr(self, key: str, amount: int = 1) -> int:
        return await self.incrby(key, amount)

    async def decrby(self, key: str, amount: int = 1) -> int:
        return await self.incrby(key, -amount)

    async def decr(self, key: str, amount: int = 1) -> int:
        return await self.incrby(key, -amount)

    async def aclose(self) -> None:
        self.closed = True


class SampleRecord(BaseModel):
    """Candidate keyed by the second parent, stored with ID/Name field names."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(default=0, alias="ID")
    name: str = Field(default="", alias="Name")

    def derive_key(self, parent1: str, parent2: str) -> str:
        return "TEST:KEY:" + parent2

    @classmethod
    def master_key(cls) -> str:
        return "TEST:KEY:"

    @classmethod
    def expiration(cls) -> timedelta:
        return timedelta(minutes=5)


class UnregisteredRecord(BaseModel):
    """Candidate that the fixtures never register."""

    value: str = ""

    def derive_key(self, parent1: str, parent2: str) -> str:
        return f"OTHER:{parent1}:{parent2}"

    @classmethod
    def master_key(cls) -> str:
        return "OTHER:"

    @classmethod
    def expiration(cls) -> timedelta:
        return timedelta(minutes=1)


@dataclass
class OrderLine:
    """Dataclass candidate scoped by customer and order; uses the session default TTL."""

    sku: str = ""
    qty: int = 0

    def derive_key(self, parent1: str, parent2: str) -> str:
        return f"ORDER:LINES:{parent1}:{parent2}"

    @staticmethod
    def master_key() -> str:
        return "ORDER:LINES:"

    def expiration(self) -> timedelta | None:
        return None


class NotACandidate(BaseModel):
    """Plain model without the candidate methods."""

    value: int = 0


class PlainRecord:
    """Candidate written as a plain class; pydantic has no schema for it."""

    def __init__(self, value: str = "") -> None:
        self.value = value

    def derive_key(self, parent1: str, parent2: str) -> str:
        return f"PLAIN:{parent1}:{parent2}"

    @classmethod
    def master_key(cls) -> str:
        return "PLAIN:"

    @classmethod
    def expiration(cls) -> timedelta:
        return timedelta(minutes=1)
