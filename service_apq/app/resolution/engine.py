"""
Resolves a persisted query hash to query text.
"""

from typing import Optional

from shared.errors import HashMismatch
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..integrity.verifier import IntegrityVerifier
from ..models import ApqRequest, CacheEntry, Resolution, ResolutionStatus
from ..store.base import PersistedQueryStore
from ..tasks.background import BackgroundTaskGroup


class ResolutionEngine:
    """
    Lookup, then one of three outcomes:

    - hit: the stored text is used, the client's ``query`` (if any) is ignored;
    - miss with query: the query is verified against the hash, registered in
      the background and used;
    - miss without query: NOT_FOUND, so the client retries with the full query.
      Verification is deliberately not run on this path; there is nothing to
      verify until the client sends the text.
    """

    def __init__(
        self,
        store: PersistedQueryStore,
        background: BackgroundTaskGroup,
        apq_ttl_seconds: int,
        verifier: Optional[IntegrityVerifier] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.background = background
        self.apq_ttl_seconds = apq_ttl_seconds
        self.verifier = verifier or IntegrityVerifier()
        self.metrics = metrics
        self.logger = get_logger("apq.resolution")

    async def resolve(self, request: ApqRequest) -> Resolution:
        sha256_hash = request.sha256_hash
        entry = await self.store.find(sha256_hash)

        if entry is not None:
            self._count("apq_lookups_total", result="hit")
            self.logger.debug("Persisted query hit", sha256_hash=sha256_hash)
            return Resolution(status=ResolutionStatus.HIT, query=entry.query)

        self._count("apq_lookups_total", result="miss")

        if request.query is None:
            self.logger.debug("Persisted query not found", sha256_hash=sha256_hash)
            return Resolution(status=ResolutionStatus.NOT_FOUND)

        try:
            self.verifier.verify(request.query, sha256_hash)
        except HashMismatch:
            self._count("apq_registrations_total", result="rejected")
            self.logger.info("Persisted query hash mismatch", sha256_hash=sha256_hash)
            raise

        self.background.spawn(
            self._register(sha256_hash, request.query),
            label=f"apq-save-{sha256_hash[:12]}",
        )
        return Resolution(status=ResolutionStatus.MISS, query=request.query)

    async def _register(self, sha256_hash: str, query: str) -> None:
        entry = CacheEntry(hash=sha256_hash, query=query, ttl_seconds=self.apq_ttl_seconds)
        try:
            await self.store.save(sha256_hash, entry, self.apq_ttl_seconds)
        except Exception:
            self._count("apq_registrations_total", result="error")
            raise
        self._count("apq_registrations_total", result="saved")
        self.logger.info("Persisted query registered", sha256_hash=sha256_hash, ttl=self.apq_ttl_seconds)

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
