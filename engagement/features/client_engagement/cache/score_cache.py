"""
In-memory cache of the most recent batch pass.

The cache holds one immutable snapshot. A pass publishes a new snapshot
by swapping the reference, so readers see either the previous pass or
the new one in full, never a mix.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType

from engagement.features.client_engagement.domain.models import CacheInfo, EngagementScore
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class _CacheSnapshot:
    scores: Mapping[str, EngagementScore] = field(default_factory=lambda: MappingProxyType({}))
    computed_at: datetime | None = None


class ScoreCache:
    def __init__(self):
        self._snapshot = _CacheSnapshot()
        self._write_lock = threading.Lock()

    def get(self, client_id: str) -> EngagementScore | None:
        return self._snapshot.scores.get(client_id)

    def list_all(self) -> list[EngagementScore]:
        return list(self._snapshot.scores.values())

    def info(self) -> CacheInfo:
        snapshot = self._snapshot
        return CacheInfo(count=len(snapshot.scores), last_computed_at=snapshot.computed_at)

    def is_stale(self, max_age: timedelta, now: datetime) -> bool:
        """True when nothing has been computed yet or the last pass is older than max_age."""
        computed_at = self._snapshot.computed_at
        return computed_at is None or now - computed_at > max_age

    def replace(self, scores: Iterable[EngagementScore], computed_at: datetime) -> None:
        """
        Publish a full pass. Entries from the previous pass are dropped,
        including clients that no longer exist.
        """
        new_scores = MappingProxyType({score.client_id: score for score in scores})
        with self._write_lock:
            previous = self._snapshot
            self._snapshot = _CacheSnapshot(scores=new_scores, computed_at=computed_at)

        logger.info(
            "Score cache replaced",
            cached_scores=len(new_scores),
            previous_scores=len(previous.scores),
            computed_at=computed_at.isoformat(),
        )
