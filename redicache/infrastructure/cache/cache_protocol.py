"""Cache candidate protocol: the capability every cacheable record implements."""

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheCandidate(Protocol):
    """Protocol for record types that may be stored through a RedisSession.

    Implement on a pydantic model or dataclass. master_key and expiration
    are usually classmethods since they are constant per type; derive_key
    may read instance fields but must be deterministic for the same
    parents.
    """

    def derive_key(self, parent1: str, parent2: str) -> str:
        """Return the logical cache key, scoped under master_key() by convention."""
        ...

    def master_key(self) -> str:
        """Return the type's master key pattern (registry index, display only)."""
        ...

    def expiration(self) -> timedelta | None:
        """Return the default expiration; None falls back to the session default."""
        ...
