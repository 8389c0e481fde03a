"""
Persisted query stores.

The resolution engine only depends on the ``PersistedQueryStore`` contract;
``create_store`` picks the backend named by configuration.
"""

from shared.config import BaseConfig

from .base import PersistedQueryStore
from .memory import InMemoryPersistedQueryStore
from .redis_store import RedisPersistedQueryStore


def create_store(config: BaseConfig) -> PersistedQueryStore:
    """Build the store selected by ``config.store_backend``."""
    if config.store_backend == "memory":
        return InMemoryPersistedQueryStore()
    return RedisPersistedQueryStore(config.redis_url)


__all__ = [
    "PersistedQueryStore",
    "InMemoryPersistedQueryStore",
    "RedisPersistedQueryStore",
    "create_store",
]
