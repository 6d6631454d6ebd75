"""
Engagement batch engine.

Scores every known client against a single captured 'now', tolerating
per-client failures, then publishes the pass to the score cache in one
swap.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

from engagement.config import settings
from engagement.features.client_engagement.cache.score_cache import ScoreCache
from engagement.features.client_engagement.domain.errors import (
    BatchTimeoutError,
    ClientListFetchError,
    EngagementError,
)
from engagement.features.client_engagement.domain.models import EngagementScore
from engagement.features.client_engagement.pipeline.scoring.service import ClientScorer
from engagement.features.client_engagement.repository.record_store import RecordStore
from engagement.infrastructure.observability.logging import get_logger, log_batch_summary

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class BatchRunMetrics:
    """Metrics tracking for a single batch pass."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all metrics for a new pass."""
        self.start_time = utc_now()
        self._started = time.monotonic()
        self.clients_found = 0
        self.clients_scored = 0
        self.clients_failed = 0
        self.clients_timed_out = 0
        self.total_duration_seconds = 0.0
        self.errors: list[dict] = []

    def record_success(self):
        self.clients_scored += 1

    def record_failure(self, client_id: str, error: BaseException):
        """Record a client skipped because scoring raised."""
        self.clients_failed += 1
        self.errors.append(
            {
                "client_id": client_id,
                "error": str(error),
                "error_type": type(error).__name__,
            }
        )

        logger.error(
            "Engagement scoring failed for client",
            client_id=client_id,
            error=str(error),
            error_type=type(error).__name__,
            cause=str(error.__cause__) if error.__cause__ else None,
        )

    def record_timeout(self, client_id: str, timeout_seconds: float):
        self.clients_failed += 1
        self.clients_timed_out += 1
        error = f"Scoring timed out after {timeout_seconds}s"
        self.errors.append({"client_id": client_id, "error": error, "error_type": "TimeoutError"})

        logger.error("Engagement scoring timed out for client", client_id=client_id, error=error)

    def finalize(self):
        self.total_duration_seconds = time.monotonic() - self._started

    def to_dict(self) -> dict:
        return {
            "job_run": "engagement_batch",
            "start_time": self.start_time.isoformat(),
            "total_duration_seconds": round(self.total_duration_seconds, 3),
            "clients_found": self.clients_found,
            "clients_scored": self.clients_scored,
            "clients_failed": self.clients_failed,
            "clients_timed_out": self.clients_timed_out,
            "errors": self.errors[:10],
        }


class BatchEngine:
    """Runs full scoring passes and owns the only write path into the cache."""

    def __init__(
        self,
        store: RecordStore,
        cache: ScoreCache,
        scorer: ClientScorer | None = None,
        *,
        max_concurrency: int | None = None,
        client_timeout_seconds: float | None = None,
        batch_timeout_seconds: float | None = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.cache = cache
        self.scorer = scorer or ClientScorer(store)
        self.max_concurrency = (
            max_concurrency
            if max_concurrency is not None
            else settings.ENGAGEMENT_MAX_CONCURRENT_CLIENTS
        )
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        self.client_timeout_seconds = (
            client_timeout_seconds
            if client_timeout_seconds is not None
            else settings.ENGAGEMENT_CLIENT_TIMEOUT_SECONDS
        )
        self.batch_timeout_seconds = (
            batch_timeout_seconds
            if batch_timeout_seconds is not None
            else settings.ENGAGEMENT_BATCH_TIMEOUT_SECONDS
        )
        self.clock = clock
        self.is_running = False
        self.last_run_time: datetime | None = None
        self._last_metrics: BatchRunMetrics | None = None
        self._run_lock = asyncio.Lock()

    async def run(self, now: datetime | None = None) -> list[EngagementScore]:
        """
        Run one complete scoring pass.

        Args:
            now: Reference time for every client in the pass (defaults to the clock)

        Returns:
            Scores for every client scored successfully, in client-list order

        Raises:
            ClientListFetchError: The client list could not be fetched
            BatchTimeoutError: The pass exceeded its deadline
        """
        async with self._run_lock:
            self.is_running = True
            try:
                if self.batch_timeout_seconds is not None:
                    try:
                        return await asyncio.wait_for(
                            self._run_pass(now), timeout=self.batch_timeout_seconds
                        )
                    except TimeoutError:
                        logger.error(
                            "Engagement batch deadline exceeded; cache left unchanged",
                            timeout_seconds=self.batch_timeout_seconds,
                        )
                        raise BatchTimeoutError(self.batch_timeout_seconds) from None
                return await self._run_pass(now)
            finally:
                self.is_running = False

    async def _run_pass(self, now: datetime | None) -> list[EngagementScore]:
        pass_now = now or self.clock()
        metrics = BatchRunMetrics()

        logger.info("Starting engagement score calculation", now=pass_now.isoformat())

        try:
            clients = await self.store.list_clients()
        except Exception as e:
            logger.error("Failed to fetch client list", error=str(e), error_type=type(e).__name__)
            raise ClientListFetchError(f"Failed to fetch client list: {e}") from e

        metrics.clients_found = len(clients)
        logger.info("Clients found for engagement analysis", clients_found=len(clients))

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self._score_with_semaphore(semaphore, client.id, pass_now, metrics) for client in clients)
        )
        scores = [score for score in results if score is not None]

        self.cache.replace(scores, self.clock())

        metrics.finalize()
        self._last_metrics = metrics
        self.last_run_time = pass_now
        log_batch_summary(metrics.to_dict())

        return scores

    async def _score_with_semaphore(
        self,
        semaphore: asyncio.Semaphore,
        client_id: str,
        now: datetime,
        metrics: BatchRunMetrics,
    ) -> EngagementScore | None:
        async with semaphore:
            return await self._score_client(client_id, now, metrics)

    async def _score_client(
        self, client_id: str, now: datetime, metrics: BatchRunMetrics
    ) -> EngagementScore | None:
        """Score one client; any failure is recorded and the client skipped."""
        try:
            score = await asyncio.wait_for(
                self.scorer.score_client(client_id, now), timeout=self.client_timeout_seconds
            )
        except TimeoutError:
            metrics.record_timeout(client_id, self.client_timeout_seconds)
            return None
        except EngagementError as e:
            metrics.record_failure(client_id, e)
            return None
        except Exception as e:
            # Store bugs or unexpected payloads still only cost this client
            logger.exception("Unexpected error scoring client", client_id=client_id)
            metrics.record_failure(client_id, e)
            return None

        metrics.record_success()
        return score

    def get_last_run_metrics(self) -> dict | None:
        return self._last_metrics.to_dict() if self._last_metrics else None

    def get_status(self) -> dict:
        """Current engine status and last pass metrics."""
        return {
            "job_name": "engagement_batch",
            "is_running": self.is_running,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "max_concurrent": self.max_concurrency,
            "client_timeout_seconds": self.client_timeout_seconds,
            "batch_timeout_seconds": self.batch_timeout_seconds,
            "last_run_metrics": self.get_last_run_metrics(),
        }
