"""
Redis-backed persisted query store.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import PersistedQueryStoreError
from shared.logging import get_logger

from ..models import CacheEntry
from .base import PersistedQueryStore


class RedisPersistedQueryStore(PersistedQueryStore):
    """Stores ``{"query": ...}`` under ``apq:<sha256>`` with a Redis-managed TTL."""

    KEY_PREFIX = "apq"

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("apq.store.redis")
        self._redis: Optional[redis.Redis] = client

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    def _make_key(self, sha256_hash: str) -> str:
        return f"{self.KEY_PREFIX}:{sha256_hash}"

    async def find(self, sha256_hash: str) -> Optional[CacheEntry]:
        key = self._make_key(sha256_hash)
        try:
            redis_client = await self._get_redis()
            cached_data = await redis_client.get(key)
        except RedisError as exc:
            self.logger.error("Persisted query lookup failed", key=key, error=str(exc))
            raise PersistedQueryStoreError(details={"key": key, "error": str(exc)})

        if cached_data is None:
            return None

        if isinstance(cached_data, bytes):
            cached_data = cached_data.decode("utf-8")

        try:
            query = json.loads(cached_data)["query"]
        except (ValueError, KeyError, TypeError):
            # Unreadable entries behave like a miss; the client re-registers them
            self.logger.warning("Discarding unreadable persisted query", key=key)
            return None

        return CacheEntry(hash=sha256_hash, query=query)

    async def save(self, sha256_hash: str, entry: CacheEntry, ttl_seconds: int) -> None:
        key = self._make_key(sha256_hash)
        redis_client = await self._get_redis()
        await redis_client.setex(key, ttl_seconds, json.dumps({"query": entry.query}))
        self.logger.debug("Persisted query saved", key=key, ttl=ttl_seconds)

    async def ping(self) -> bool:
        try:
            redis_client = await self._get_redis()
            return bool(await redis_client.ping())
        except RedisError as exc:
            self.logger.warning("Redis ping failed", error=str(exc))
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
