"""Typed Redis cache session.

RedisSession is the operation surface over one Redis connection: typed
record writes gated by a candidate registry, typed reads, raw string
and counter operations, key listing and deletion. Every physical key is
config.key_prefix + logical key, and every backend call is bounded by a
per-operation timeout (see redicache.core.constants).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from datetime import timedelta
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from redicache.core.config import RedisConfig, get_settings
from redicache.core.constants import (
    TIMEOUT_HEALTH_CHECK,
    TIMEOUT_PATTERN_DELETE,
    TIMEOUT_READ,
    TIMEOUT_WRITE,
)
from redicache.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    CacheConnectionError,
    DeserializationError,
    InvalidArgumentError,
    KeyNotFoundError,
    SerializationError,
    UnregisteredCandidateError,
)
from redicache.infrastructure.cache.cache_protocol import CacheCandidate
from redicache.infrastructure.cache.codec import JsonCodec
from redicache.infrastructure.cache.keys import logical_key, physical_key, physical_keys
from redicache.infrastructure.cache.registry import CandidateRegistry
from redicache.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
C = TypeVar("C", bound=CacheCandidate)

# timedelta, seconds, or None for the session default
Expiration = timedelta | int | float | None


class RedisSession:
    """Async typed cache session over redis.asyncio.

    Owns one client (created on first use or by connect(), reused for the
    session lifetime), one CandidateRegistry and a frozen RedisConfig.
    Writes of typed records require the record's master key to be
    registered; reads never check registration. Raw string and counter
    operations bypass the registry.
    """

    def __init__(
        self,
        config: RedisConfig | None = None,
        redis_client: redis.Redis | None = None,
        codec: JsonCodec | None = None,
    ) -> None:
        """Initialize the session without connecting.

        Args:
            config: Session settings; defaults to get_settings().
            redis_client: Optional Redis client for testing or DI.
            codec: Optional codec; defaults to JsonCodec().
        """
        self.config = config or get_settings()
        self.debug = self.config.debug
        self.redis = redis_client
        self.codec = codec or JsonCodec()
        self.candidates = CandidateRegistry()
        self._connected = False
        self._connect_lock = asyncio.Lock()

    @property
    def cache_expiration(self) -> timedelta:
        """Session default expiration (config.expiration_in_minutes)."""
        return self.config.default_expiration

    # --- Connection ---

    def _build_client(self) -> redis.Redis:
        cfg = self.config
        return redis.Redis(
            host=cfg.host,
            port=cfg.port,
            db=cfg.db,
            password=cfg.password.get_secret_value() if cfg.password else None,
            decode_responses=True,
            socket_connect_timeout=TIMEOUT_HEALTH_CHECK,
            socket_keepalive=True,
            retry=Retry(ExponentialBackoff(), cfg.max_retries),
            retry_on_error=[redis.ConnectionError, redis.TimeoutError],
            health_check_interval=cfg.idle_timeout_seconds,
        )

    async def connect(self) -> redis.Redis:
        """Create the client if needed and health-check it with PING.

        Safe to call concurrently: only one client is ever created.

        Returns:
            The connected client.

        Raises:
            CacheConnectionError: If PING fails or exceeds its budget.
        """
        if self._connected and self.redis is not None:
            return self.redis
        async with self._connect_lock:
            if self._connected and self.redis is not None:
                return self.redis
            owned = self.redis is None
            if owned:
                self.redis = self._build_client()
            client = self.redis
            try:
                await asyncio.wait_for(client.ping(), TIMEOUT_HEALTH_CHECK)
            except (asyncio.TimeoutError, redis.RedisError, OSError) as e:
                reason = str(e) or f"ping timed out after {TIMEOUT_HEALTH_CHECK}s"
                logger.warning("Redis connection failed: %s: %s", self.config.address, reason)
                if owned:
                    await client.aclose()
                    self.redis = None
                raise CacheConnectionError(self.config.address, reason) from e
            self._connected = True
            logger.info(
                "Redis cache connected: %s (db %s, prefix %r)",
                self.config.address,
                self.config.db,
                self.config.key_prefix,
            )
            return client

    async def _client(self) -> redis.Redis:
        return await self.connect()

    async def close(self) -> None:
        """Close the client. The session reconnects lazily if used again."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected: %s", self.config.address)

    async def __aenter__(self) -> RedisSession:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def raw(self) -> redis.Redis | None:
        """Return the underlying client for commands this API does not cover.

        No prefixing, registration or timeout applies to calls made on it.
        """
        return self.redis

    async def ping(self) -> bool:
        """Health check. Returns True or raises BackendError."""
        client = await self._client()
        await self._execute("ping", None, client.ping(), TIMEOUT_HEALTH_CHECK)
        return True

    # --- Candidate registry ---

    def register_candidate(self, candidate: CacheCandidate, description: str) -> None:
        """Allow writes for candidate's type (keyed by its master key)."""
        self.candidates.register(candidate, description)

    def list_candidates(self) -> dict[str, str]:
        """Return registered master keys and their descriptions."""
        return self.candidates.list()

    def is_registered(self, master_key: str) -> bool:
        return self.candidates.is_registered(master_key)

    # --- Typed writes ---

    async def set(self, value: CacheCandidate | None, parent1: str, parent2: str) -> None:
        """Add or update a record using the record type's default expiration."""
        candidate = self._require_candidate("set", value, "value")
        await self.set_with_expiration(candidate, candidate.expiration(), parent1, parent2)

    async def set_with_expiration(
        self,
        value: CacheCandidate | None,
        expiration: Expiration,
        parent1: str,
        parent2: str,
    ) -> None:
        """Store a record under key_prefix + value.derive_key(parent1, parent2).

        Args:
            value: Registered cache candidate.
            expiration: TTL; None uses the session default, zero stores
                without TTL.
            parent1: First parent-scope identifier passed to derive_key.
            parent2: Second parent-scope identifier passed to derive_key.

        Raises:
            InvalidArgumentError: value is None or not a CacheCandidate,
                or expiration is negative.
            UnregisteredCandidateError: value's master key is not registered.
            SerializationError: value cannot be encoded.
            BackendError: SET failed or timed out.
        """
        op = "set_with_expiration"
        candidate = self._require_candidate(op, value, "value")
        self._require_registered(op, candidate)
        ttl = self._ttl(op, expiration)
        payload = self._encode(op, candidate)
        key = physical_key(self.config.key_prefix, candidate.derive_key(parent1, parent2))
        await self._write(op, key, payload, ttl)

    async def set_slice(
        self,
        values: Sequence[C] | None,
        parent1: str,
        parent2: str,
        exemplar: C,
    ) -> None:
        """Store a list of records as one value, using the exemplar's default expiration."""
        candidate = self._require_candidate("set_slice", exemplar, "exemplar")
        await self.set_slice_with_expiration(
            values, parent1, parent2, candidate.expiration(), exemplar
        )

    async def set_slice_with_expiration(
        self,
        values: Sequence[C] | None,
        parent1: str,
        parent2: str,
        expiration: Expiration,
        exemplar: C,
    ) -> None:
        """Store a list of records as one JSON array under one key.

        The exemplar (a zero or sample instance of the element type)
        supplies the master key checked against the registry and the key
        derivation; the list is encoded as list[type(exemplar)].

        Raises:
            InvalidArgumentError: values is None, an element is not an
                instance of type(exemplar), or exemplar is not a candidate.
            UnregisteredCandidateError: exemplar's master key is not registered.
            SerializationError: values cannot be encoded.
            BackendError: SET failed or timed out.
        """
        op = "set_slice_with_expiration"
        if values is None:
            self._log(op, "Refused nil values")
            raise InvalidArgumentError("nil value", "values")
        candidate = self._require_candidate(op, exemplar, "exemplar")
        self._require_registered(op, candidate)
        ttl = self._ttl(op, expiration)
        values = list(values)
        record_type = type(candidate)
        for index, item in enumerate(values):
            if not isinstance(item, record_type):
                self._log(
                    op,
                    "Refused element %d: %s is not %s",
                    index,
                    type(item).__name__,
                    record_type.__name__,
                )
                raise InvalidArgumentError(
                    f"values[{index}] is {type(item).__name__}, expected {record_type.__name__}",
                    "values",
                )
        payload = self._encode(op, values, as_type=list[record_type])
        key = physical_key(self.config.key_prefix, candidate.derive_key(parent1, parent2))
        await self._write(op, key, payload, ttl)

    # --- Raw writes ---

    async def set_str(self, value: str, key: str, expiration: Expiration = None) -> None:
        """Store a raw string. Not gated by the registry."""
        op = "set_str"
        ttl = self._ttl(op, expiration)
        await self._write(op, physical_key(self.config.key_prefix, key), value, ttl)

    async def counter_set(self, value: int, key: str, expiration: Expiration = None) -> None:
        """Store an integer counter value. Not gated by the registry."""
        op = "counter_set"
        ttl = self._ttl(op, expiration)
        await self._write(op, physical_key(self.config.key_prefix, key), int(value), ttl)

    async def counter_get(self, key: str) -> int:
        """Return the integer stored at key.

        Raises:
            KeyNotFoundError: key does not exist.
            DeserializationError: stored value is not an integer.
        """
        value = await self.get(key)
        try:
            return int(value)
        except ValueError as e:
            _key = physical_key(self.config.key_prefix, key)
            self._log("counter_get", "Value at '%s' is not an integer: %r", _key, value)
            raise DeserializationError("int", str(e), key=_key) from e

    async def counter_incr(self, key: str) -> int:
        """Increment by one; returns the new value."""
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        return await self._execute("counter_incr", _key, client.incr(_key), TIMEOUT_WRITE)

    async def counter_incr_by(self, amount: int, key: str) -> int:
        """Increment by amount; returns the new value."""
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        return await self._execute(
            "counter_incr_by", _key, client.incrby(_key, int(amount)), TIMEOUT_WRITE
        )

    async def counter_decr(self, key: str) -> int:
        """Decrement by one; returns the new value."""
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        return await self._execute("counter_decr", _key, client.decr(_key), TIMEOUT_WRITE)

    async def counter_decr_by(self, amount: int, key: str) -> int:
        """Decrement by amount; returns the new value."""
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        return await self._execute(
            "counter_decr_by", _key, client.decrby(_key, int(amount)), TIMEOUT_WRITE
        )

    # --- Reads ---

    async def get(self, key: str) -> str:
        """Return the raw value stored at key_prefix + key.

        Raises:
            KeyNotFoundError: key does not exist (or has expired).
            BackendError: GET failed or timed out.
        """
        op = "get"
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        value = await self._execute(op, _key, client.get(_key), TIMEOUT_READ)
        if value is None:
            self._log(op, "Error getting '%s' from cache: key not found", _key)
            raise KeyNotFoundError(op, _key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def get_scan_by_key(self, key: str, into: type[T] | Any) -> T:
        """Read key and decode it into the type into.

        Args:
            key: Logical key (the prefix is applied).
            into: Model class, dataclass, or generic alias such as list[Model].

        Raises:
            BackendError: propagated from get().
            DeserializationError: stored value does not fit into.
        """
        value = await self.get(key)
        _key = physical_key(self.config.key_prefix, key)
        try:
            return self.codec.decode(value, into, key=_key)
        except DeserializationError as e:
            self._log("get_scan_by_key", "Error unmarshaling '%s': %s", _key, e.details["reason"])
            raise

    async def get_scan(
        self,
        parent1: str,
        parent2: str,
        exemplar: CacheCandidate,
        into: type[T] | Any = None,
    ) -> T:
        """Read the record exemplar.derive_key(parent1, parent2) points at.

        into defaults to type(exemplar); pass list[Model] to read a slice
        (or use get_scan_slice). Registration is not checked.
        """
        candidate = self._require_candidate("get_scan", exemplar, "exemplar")
        target = into if into is not None else type(candidate)
        return await self.get_scan_by_key(candidate.derive_key(parent1, parent2), target)

    async def get_scan_slice(self, parent1: str, parent2: str, exemplar: C) -> list[C]:
        """Read a list stored by set_slice for the exemplar's type."""
        candidate = self._require_candidate("get_scan_slice", exemplar, "exemplar")
        return await self.get_scan_by_key(
            candidate.derive_key(parent1, parent2), list[type(candidate)]
        )

    # --- Keys and deletion ---

    async def get_keys(self, pattern: str) -> list[str]:
        """Return physical keys matching key_prefix + pattern (glob syntax).

        An empty list is returned when nothing matches.
        """
        op = "get_keys"
        match = physical_key(self.config.key_prefix, pattern)
        client = await self._client()
        keys = await self._execute(op, match, client.keys(match), TIMEOUT_WRITE)
        result = [k.decode("utf-8") if isinstance(k, bytes) else k for k in keys]
        self._log(op, "'%s' result: %s", pattern, result)
        return result

    def logical_key(self, key: str) -> str:
        """Strip the configured prefix from a physical key (e.g. from get_keys)."""
        return logical_key(self.config.key_prefix, key)

    async def del_key(self, key: str) -> int:
        """Delete key_prefix + key. Returns the number of keys removed (0 or 1)."""
        _key = physical_key(self.config.key_prefix, key)
        client = await self._client()
        return await self._execute("del_key", _key, client.delete(_key), TIMEOUT_READ)

    async def del_keys(self, *keys: str) -> int:
        """Delete several logical keys (the prefix is applied to each).

        Returns the number of keys actually removed; 0 when no keys are given.
        """
        if not keys:
            return 0
        _keys = physical_keys(self.config.key_prefix, keys)
        client = await self._client()
        return await self._execute(
            "del_keys", ", ".join(_keys), client.delete(*_keys), TIMEOUT_WRITE
        )

    async def del_by_pattern(self, pattern: str) -> int:
        """List keys matching key_prefix + pattern, then delete them.

        Not atomic: keys created after the listing are kept, and keys
        removed by someone else in between lower the returned count.
        Returns 0 when nothing matches.
        """
        op = "del_by_pattern"
        match = physical_key(self.config.key_prefix, pattern)
        client = await self._client()

        async def _list_and_delete() -> int:
            keys = await client.keys(match)
            self._log(op, "'%s' result: %s", pattern, keys)
            if not keys:
                return 0
            return await client.delete(*keys)

        return await self._execute(op, match, _list_and_delete(), TIMEOUT_PATTERN_DELETE)

    # --- Internals ---

    async def _execute(
        self,
        operation: str,
        key: str | None,
        awaitable: Awaitable[T],
        timeout: float,
    ) -> T:
        """Await a backend call within timeout, mapping failures to BackendError."""
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except (asyncio.TimeoutError, redis.TimeoutError) as e:
            self._log(operation, "Timed out on '%s' after %ss", key, timeout)
            raise BackendTimeoutError(operation, timeout, key=key) from e
        except redis.RedisError as e:
            self._log(operation, "Error on '%s': %s", key, e)
            raise BackendError(operation, str(e), key=key) from e

    async def _write(self, operation: str, key: str, value: Any, ttl: timedelta | None) -> None:
        client = await self._client()
        px = int(ttl.total_seconds() * 1000) if ttl is not None else None
        await self._execute(operation, key, client.set(key, value, px=px), TIMEOUT_WRITE)

    def _encode(self, operation: str, value: Any, as_type: Any = None) -> str:
        try:
            return self.codec.encode(value, as_type=as_type)
        except SerializationError as e:
            self._log(operation, "Error serializing %s: %s", e.details["type"], e.details["reason"])
            raise

    def _ttl(self, operation: str, expiration: Expiration) -> timedelta | None:
        """Normalize expiration. None means session default; zero means no TTL."""
        if expiration is None:
            expiration = self.cache_expiration
        if isinstance(expiration, (int, float)) and not isinstance(expiration, bool):
            expiration = timedelta(seconds=expiration)
        if not isinstance(expiration, timedelta):
            self._log(operation, "Refused expiration of type %s", type(expiration).__name__)
            raise InvalidArgumentError(
                f"unsupported expiration type: {type(expiration).__name__}", "expiration"
            )
        if expiration < timedelta(0):
            self._log(operation, "Refused negative expiration %s", expiration)
            raise InvalidArgumentError(f"negative expiration: {expiration}", "expiration")
        if expiration == timedelta(0):
            return None
        # Redis PX needs at least one millisecond
        return max(expiration, timedelta(milliseconds=1))

    def _require_candidate(self, operation: str, value: Any, argument: str) -> CacheCandidate:
        if value is None:
            self._log(operation, "Refused nil %s", argument)
            raise InvalidArgumentError("nil value", argument)
        if not isinstance(value, CacheCandidate):
            self._log(operation, "Refused %s: not a cache candidate", type(value).__name__)
            raise InvalidArgumentError(
                f"{type(value).__name__} does not implement CacheCandidate", argument
            )
        return value

    def _require_registered(self, operation: str, candidate: CacheCandidate) -> None:
        master_key = candidate.master_key()
        if not self.candidates.is_registered(master_key):
            self._log(operation, "Refused unregistered candidate %r", master_key)
            raise UnregisteredCandidateError(master_key)

    def _log(self, method: str, fmt: str, *args: Any) -> None:
        """Debug diagnostics, emitted only when config.debug is set."""
        if not self.debug:
            return
        logger.debug("[%s] " + fmt, method, *args)


async def init_session(
    config: RedisConfig | None = None,
    redis_client: redis.Redis | None = None,
) -> RedisSession:
    """Create a session and connect it.

    Args:
        config: Session settings; defaults to get_settings().
        redis_client: Optional client for testing or DI.

    Returns:
        Connected RedisSession.

    Raises:
        CacheConnectionError: If the backend cannot be reached. Callers
            treat this as fatal.
    """
    session = RedisSession(config, redis_client=redis_client)
    await session.connect()
    return session
