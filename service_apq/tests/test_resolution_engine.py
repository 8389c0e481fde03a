"""
Unit tests for the resolution engine.
"""

import hashlib
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from service_apq.app.models import ApqRequest, CacheEntry, PersistedQueryExtension, ResolutionStatus
from service_apq.app.resolution.engine import ResolutionEngine
from service_apq.app.store.memory import InMemoryPersistedQueryStore
from service_apq.app.tasks.background import BackgroundTaskGroup
from shared.errors import HashMismatch
from shared.metrics import MetricsCollector

QUERY = "query Hello { hello }"
QUERY_HASH = hashlib.sha256(QUERY.encode("utf-8")).hexdigest()
APQ_TTL = 3600


def make_request(query=None, sha256_hash=QUERY_HASH):
    extension = PersistedQueryExtension(version=1, sha256Hash=sha256_hash)
    return ApqRequest(extension=extension, query=query)


class TestResolutionEngine:
    """Test cases for ResolutionEngine."""

    @pytest.fixture
    def store(self):
        return InMemoryPersistedQueryStore()

    @pytest.fixture
    def background(self):
        return BackgroundTaskGroup("test")

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("apq")

    @pytest.fixture
    def engine(self, store, background, metrics):
        return ResolutionEngine(store, background, apq_ttl_seconds=APQ_TTL, metrics=metrics)

    @pytest.mark.asyncio
    async def test_hit_uses_stored_query(self, engine, store, background, metrics):
        """Hit resolves to stored text and registers nothing."""
        await store.save(QUERY_HASH, CacheEntry(hash=QUERY_HASH, query=QUERY), APQ_TTL)

        with patch.object(store, "save", new_callable=AsyncMock) as mock_save:
            resolution = await engine.resolve(make_request())
            await background.drain()

        assert resolution.status is ResolutionStatus.HIT
        assert resolution.query == QUERY
        mock_save.assert_not_called()
        assert metrics.get_sample_value("apq_lookups_total", result="hit") == 1.0

    @pytest.mark.asyncio
    async def test_hit_ignores_client_query(self, engine, store):
        """A client query on a hit is neither verified nor used."""
        await store.save(QUERY_HASH, CacheEntry(hash=QUERY_HASH, query=QUERY), APQ_TTL)

        resolution = await engine.resolve(make_request(query="{ something else }"))

        assert resolution.query == QUERY

    @pytest.mark.asyncio
    async def test_miss_with_matching_query_registers(self, engine, store, background, metrics):
        """Verified queries are saved in the background with the APQ ttl."""
        resolution = await engine.resolve(make_request(query=QUERY))

        assert resolution.status is ResolutionStatus.MISS
        assert resolution.query == QUERY
        assert background.pending == 1

        await background.drain()

        entry = await store.find(QUERY_HASH)
        assert entry.query == QUERY
        assert entry.ttl_seconds == APQ_TTL
        assert metrics.get_sample_value("apq_lookups_total", result="miss") == 1.0
        assert metrics.get_sample_value("apq_registrations_total", result="saved") == 1.0

    @pytest.mark.asyncio
    async def test_save_is_not_awaited_before_resolution(self, engine, store, background):
        """resolve() returns while the save is still pending."""
        resolution = await engine.resolve(make_request(query=QUERY))

        assert resolution.found
        assert await store.find(QUERY_HASH) is None

        await background.drain()
        assert await store.find(QUERY_HASH) is not None

    @pytest.mark.asyncio
    async def test_miss_with_mismatching_query(self, engine, store, background, metrics):
        """Unverified text is rejected and never stored."""
        with pytest.raises(HashMismatch):
            await engine.resolve(make_request(query="{ tampered }"))

        await background.drain()
        assert await store.find(QUERY_HASH) is None
        assert metrics.get_sample_value("apq_registrations_total", result="rejected") == 1.0

    @pytest.mark.asyncio
    async def test_miss_without_query_skips_verification(self, store, background):
        """
        Unseen hash and no query goes straight to NOT_FOUND.

        The verifier must not run: there is no text to check yet and the
        client is expected to retry with the full query.
        """
        verifier = MagicMock()
        engine = ResolutionEngine(store, background, apq_ttl_seconds=APQ_TTL, verifier=verifier)

        resolution = await engine.resolve(make_request())

        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert resolution.query is None
        assert not resolution.found
        verifier.verify.assert_not_called()
        assert background.pending == 0

    @pytest.mark.asyncio
    async def test_failed_save_is_counted(self, engine, store, background, metrics):
        """A failing background save does not affect the resolution."""
        with patch.object(store, "save", new_callable=AsyncMock) as mock_save:
            mock_save.side_effect = RuntimeError("store down")

            resolution = await engine.resolve(make_request(query=QUERY))
            await background.drain()

        assert resolution.query == QUERY
        mock_save.assert_called_once()
        assert metrics.get_sample_value("apq_registrations_total", result="error") == 1.0

    @pytest.mark.asyncio
    async def test_concurrent_registrations_are_idempotent(self, engine, store, background):
        """Two registrations of the same hash leave a single entry."""
        await engine.resolve(make_request(query=QUERY))
        await engine.resolve(make_request(query=QUERY))
        await background.drain()

        assert len(store) == 1
        assert (await store.find(QUERY_HASH)).query == QUERY
