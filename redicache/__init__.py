"""redicache: typed access layer over Redis.

Register record types, then store and read them (or lists of them)
with per-type key derivation and expiration:

    session = await init_session(RedisConfig(key_prefix="app:"))
    session.register_candidate(Order.model_construct(), "orders by customer")
    await session.set(order, customer_id, order_id)
    order = await session.get_scan(customer_id, order_id, Order.model_construct())
"""

from redicache.core.config import RedisConfig, get_settings
from redicache.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    CacheConnectionError,
    CacheException,
    DeserializationError,
    InvalidArgumentError,
    KeyNotFoundError,
    SerializationError,
    UnregisteredCandidateError,
)
from redicache.infrastructure.cache import (
    CacheCandidate,
    CandidateRegistry,
    JsonCodec,
    RedisSession,
    init_session,
)

__version__ = "1.0.0"

__all__ = [
    # Config
    "RedisConfig",
    "get_settings",
    # Session
    "CacheCandidate",
    "CandidateRegistry",
    "JsonCodec",
    "RedisSession",
    "init_session",
    # Exceptions
    "BackendError",
    "BackendTimeoutError",
    "CacheConnectionError",
    "CacheException",
    "DeserializationError",
    "InvalidArgumentError",
    "KeyNotFoundError",
    "SerializationError",
    "UnregisteredCandidateError",
]
