"""Domain layer: cache exceptions.

No dependencies on the backend client. Used by the cache infrastructure
and by callers that branch on error kinds.
"""

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

__all__ = [
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
