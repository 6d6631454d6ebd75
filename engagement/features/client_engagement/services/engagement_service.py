"""
Engagement service - the operations exposed to callers (HTTP router,
worker jobs). Wires the record store, batch engine, cache and report
generator together.
"""

from __future__ import annotations

from engagement.features.client_engagement.cache.score_cache import ScoreCache
from engagement.features.client_engagement.domain.models import (
    CacheInfo,
    EngagementReport,
    EngagementScore,
)
from engagement.features.client_engagement.pipeline.batch.service import (
    BatchEngine,
    Clock,
    utc_now,
)
from engagement.features.client_engagement.pipeline.reporting.service import ReportGenerator
from engagement.features.client_engagement.repository.record_store import (
    PostgresRecordStore,
    RecordStore,
)
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class EngagementService:
    def __init__(
        self,
        store: RecordStore,
        *,
        cache: ScoreCache | None = None,
        engine: BatchEngine | None = None,
        report_generator: ReportGenerator | None = None,
        clock: Clock = utc_now,
    ):
        self.cache = cache or ScoreCache()
        self.engine = engine or BatchEngine(store, self.cache, clock=clock)
        self.report_generator = report_generator or ReportGenerator()
        self.clock = clock

    async def run_batch(self) -> list[EngagementScore]:
        """Run a full scoring pass and replace the cache."""
        return await self.engine.run()

    def get_cached_scores(self) -> list[EngagementScore]:
        return self.cache.list_all()

    def get_cached_score(self, client_id: str) -> EngagementScore | None:
        return self.cache.get(client_id)

    def get_cache_info(self) -> CacheInfo:
        return self.cache.info()

    async def generate_report(self) -> EngagementReport:
        """
        Run a fresh pass and summarize it.

        The report is built from the pass's own result list, never from
        the cache, so it cannot mix scores from different passes.
        """
        logger.info("Generating engagement report")
        scores = await self.run_batch()
        return self.report_generator.generate(scores, self.clock())


# Default wiring against the Postgres record store.
engagement_service = EngagementService(PostgresRecordStore())


def get_engagement_service() -> EngagementService:
    """FastAPI dependency returning the shared service."""
    return engagement_service
