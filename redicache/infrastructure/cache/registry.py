"""Registry of record types allowed to be written to the cache."""

from __future__ import annotations

import threading

from redicache.infrastructure.cache.cache_protocol import CacheCandidate


class CandidateRegistry:
    """Maps master key patterns to human-readable descriptions.

    Writes for a master key that is not registered are refused by the
    session. Registering the same master key again replaces its
    description. Registration does not look at record contents.
    """

    def __init__(self) -> None:
        self._candidates: dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, candidate: CacheCandidate, description: str) -> None:
        """Add or overwrite the entry for candidate.master_key()."""
        master_key = candidate.master_key()
        with self._lock:
            self._candidates[master_key] = description

    def list(self) -> dict[str, str]:
        """Return a copy of master key -> description."""
        with self._lock:
            return dict(self._candidates)

    def is_registered(self, master_key: str) -> bool:
        with self._lock:
            return master_key in self._candidates

    def __contains__(self, master_key: object) -> bool:
        return isinstance(master_key, str) and self.is_registered(master_key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._candidates)
