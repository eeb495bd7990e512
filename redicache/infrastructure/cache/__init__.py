"""Cache: typed Redis session, candidate registry, codec and key helpers.

RedisSession uses redicache.core.config for connection settings; key
prefixing lives in keys.py (DRY).
"""

from redicache.infrastructure.cache.cache_protocol import CacheCandidate
from redicache.infrastructure.cache.codec import JsonCodec
from redicache.infrastructure.cache.keys import logical_key, physical_key, physical_keys
from redicache.infrastructure.cache.redis_cache import RedisSession, init_session
from redicache.infrastructure.cache.registry import CandidateRegistry

__all__ = [
    "CacheCandidate",
    "CandidateRegistry",
    "JsonCodec",
    "RedisSession",
    "init_session",
    "logical_key",
    "physical_key",
    "physical_keys",
]
