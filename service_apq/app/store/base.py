"""
Contract for the hash -> query text store consulted by the resolution engine.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import CacheEntry


class PersistedQueryStore(ABC):
    """
    Async keyed store of persisted queries with per-entry TTL.

    ``save`` is written to be dispatched as a background task: callers do not
    await it before answering the client. Overwriting an existing hash is an
    idempotent operation since the hash determines the content.
    """

    @abstractmethod
    async def find(self, sha256_hash: str) -> Optional[CacheEntry]:
        """Return the entry for ``sha256_hash`` or None on miss/expiry."""

    @abstractmethod
    async def save(self, sha256_hash: str, entry: CacheEntry, ttl_seconds: int) -> None:
        """Store ``entry`` under ``sha256_hash`` for ``ttl_seconds``."""

    async def ping(self) -> bool:
        """Report whether the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
