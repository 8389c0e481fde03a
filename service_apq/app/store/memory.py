"""
Process-local persisted query store.
"""

import time
from typing import Callable, Dict, Optional, Tuple

from shared.logging import get_logger

from ..models import CacheEntry
from .base import PersistedQueryStore


class InMemoryPersistedQueryStore(PersistedQueryStore):
    """Dict-backed store with lazy expiry, for local runs and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[CacheEntry, float]] = {}
        self.logger = get_logger("apq.store.memory")

    async def find(self, sha256_hash: str) -> Optional[CacheEntry]:
        item = self._entries.get(sha256_hash)
        if item is None:
            return None

        entry, expires_at = item
        if self._clock() >= expires_at:
            del self._entries[sha256_hash]
            self.logger.debug("Persisted query expired", sha256_hash=sha256_hash)
            return None
        return entry

    async def save(self, sha256_hash: str, entry: CacheEntry, ttl_seconds: int) -> None:
        stored = CacheEntry(hash=sha256_hash, query=entry.query, ttl_seconds=ttl_seconds)
        self._entries[sha256_hash] = (stored, self._clock() + ttl_seconds)
        self.logger.debug("Persisted query saved", sha256_hash=sha256_hash, ttl=ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)
