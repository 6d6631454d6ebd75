"""
Client scoring service - turns one client's signal records into an
EngagementScore with churn risk and insights.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar

from engagement.config import settings
from engagement.features.client_engagement.domain.errors import (
    ClientNotFoundError,
    SignalFetchError,
)
from engagement.features.client_engagement.domain.models import (
    ChurnRisk,
    EngagementScore,
    SignalKind,
    SignalSnapshot,
)
from engagement.features.client_engagement.pipeline.signals.extractors import extract_sub_scores
from engagement.features.client_engagement.repository.record_store import RecordStore
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

NO_ACTIVITY_DAYS = 999

HIGH_ENGAGEMENT_SCORE = 70
LOW_ENGAGEMENT_SCORE = 40
RECENT_ACTIVITY_DAYS = 7
CHURN_RISK_DAYS = 14

FREQUENT_SESSION_COUNT = 5
CONSISTENT_WORKOUT_COUNT = 10


@dataclass(slots=True, frozen=True)
class SignalWeights:
    """Per-signal weights as integer percentages; must total exactly 100."""

    activity: int = 15
    session: int = 30
    workout: int = 25
    content: int = 20
    milestone: int = 10

    def __post_init__(self) -> None:
        values = self.percentages()
        if any(value < 0 for value in values.values()):
            raise ValueError(f"Signal weights must be non-negative: {values}")
        total = sum(values.values())
        if total != 100:
            raise ValueError(f"Signal weights must sum to 100%, got {total}%")

    def percentages(self) -> dict[SignalKind, int]:
        return {
            SignalKind.ACTIVITY: self.activity,
            SignalKind.SESSION: self.session,
            SignalKind.WORKOUT: self.workout,
            SignalKind.CONTENT: self.content,
            SignalKind.MILESTONE: self.milestone,
        }

    def fractions(self) -> dict[SignalKind, float]:
        return {kind: pct / 100 for kind, pct in self.percentages().items()}

    def combine(self, sub_scores: dict[SignalKind, float]) -> float:
        weighted = sum(sub_scores[kind] * pct for kind, pct in self.percentages().items())
        return weighted / 100


DEFAULT_WEIGHTS = SignalWeights()


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def classify_churn_risk(overall_score: float, days_since_last_activity: int) -> ChurnRisk:
    if overall_score >= HIGH_ENGAGEMENT_SCORE and days_since_last_activity <= RECENT_ACTIVITY_DAYS:
        return ChurnRisk.LOW
    if overall_score < LOW_ENGAGEMENT_SCORE or days_since_last_activity > CHURN_RISK_DAYS:
        return ChurnRisk.HIGH
    return ChurnRisk.MEDIUM


def build_insights(
    overall_score: float, days_since_last_activity: int, counts: dict[SignalKind, int]
) -> list[str]:
    """Ordered insights: tier, recency, then per-signal notes."""
    insights: list[str] = []

    if overall_score >= HIGH_ENGAGEMENT_SCORE:
        insights.append("Highly engaged user - excellent retention")
    elif overall_score >= LOW_ENGAGEMENT_SCORE:
        insights.append("Moderately engaged - could benefit from re-engagement")
    else:
        insights.append("Low engagement - at risk of churning")

    if days_since_last_activity > CHURN_RISK_DAYS:
        insights.append(
            f"No activity for {days_since_last_activity} days - immediate attention needed"
        )
    elif days_since_last_activity > RECENT_ACTIVITY_DAYS:
        insights.append(f"{days_since_last_activity} days since last activity")
    else:
        insights.append("Recently active user")

    sessions = counts.get(SignalKind.SESSION, 0)
    if sessions == 0:
        insights.append("Not attending any sessions - recommend personal outreach")
    elif sessions >= FREQUENT_SESSION_COUNT:
        insights.append("Frequent session attendee")

    workouts = counts.get(SignalKind.WORKOUT, 0)
    if workouts == 0:
        insights.append("No workouts completed - may need workout plan review")
    elif workouts >= CONSISTENT_WORKOUT_COUNT:
        insights.append("Consistent workout completion")

    if counts.get(SignalKind.CONTENT, 0) > 0:
        insights.append("Engaged with video content")

    milestones = counts.get(SignalKind.MILESTONE, 0)
    if milestones > 0:
        insights.append(f"Unlocked {milestones} achievements")

    return insights


def last_activity_at(snapshot: SignalSnapshot) -> datetime | None:
    """
    Latest timestamp across activity, bookings (booked_at), workouts and
    content views. Milestone unlocks do not count as activity.
    """
    candidates: list[datetime] = []
    candidates.extend(event.timestamp for event in snapshot.activities)
    candidates.extend(booking.booked_at for booking in snapshot.bookings)
    candidates.extend(completion.completed_at for completion in snapshot.workouts)
    candidates.extend(view.last_watched_at for view in snapshot.content_views)
    return max(candidates) if candidates else None


def days_since(last_activity: datetime | None, now: datetime) -> int:
    if last_activity is None:
        return NO_ACTIVITY_DAYS
    elapsed = (now - last_activity).total_seconds()
    return max(0, math.floor(elapsed / 86400))


class ClientScorer:
    """Scores a single client against a fixed 'now'."""

    def __init__(
        self,
        store: RecordStore,
        *,
        lookback_days: int | None = None,
        weights: SignalWeights = DEFAULT_WEIGHTS,
    ):
        self.store = store
        if lookback_days is None:
            lookback_days = settings.ENGAGEMENT_LOOKBACK_DAYS
        if lookback_days < 0:
            raise ValueError(f"lookback_days must be non-negative, got {lookback_days}")
        self.lookback = timedelta(days=lookback_days)
        self.weights = weights

    async def score_client(self, client_id: str, now: datetime) -> EngagementScore:
        """
        Compute the engagement score for one client.

        Args:
            client_id: Client to score
            now: Pass-wide reference time

        Raises:
            ClientNotFoundError: Client no longer exists in the store
            SignalFetchError: Any of the five record fetches failed
        """
        client = await self.store.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)

        since = now - self.lookback
        snapshot = await self._fetch_signals(client_id, since)

        sub_scores = extract_sub_scores(snapshot, since)
        overall = min(max(round_half_up(self.weights.combine(sub_scores)), 0), 100)

        last_activity = last_activity_at(snapshot)
        days = days_since(last_activity, now)
        churn_risk = classify_churn_risk(overall, days)
        insights = build_insights(overall, days, snapshot.counts())

        logger.debug(
            "Client scored",
            client_id=client_id,
            overall_score=overall,
            churn_risk=churn_risk.value,
            days_since_last_activity=days,
        )

        return EngagementScore(
            client_id=client.id,
            client_name=client.name,
            client_contact_address=client.contact_address,
            activity_score=sub_scores[SignalKind.ACTIVITY],
            session_score=sub_scores[SignalKind.SESSION],
            workout_score=sub_scores[SignalKind.WORKOUT],
            content_score=sub_scores[SignalKind.CONTENT],
            milestone_score=sub_scores[SignalKind.MILESTONE],
            overall_score=overall,
            churn_risk=churn_risk,
            last_activity_at=last_activity,
            days_since_last_activity=days,
            computed_at=now,
            insights=tuple(insights),
        )

    async def _fetch_signals(self, client_id: str, since: datetime) -> SignalSnapshot:
        # Bookings are fetched unfiltered; the extractor filters on session time.
        # Every fetch settles before a failure is raised, so no store read
        # outlives this client's slot in the batch pool.
        results = await asyncio.gather(
            self._guarded(client_id, SignalKind.ACTIVITY, self.store.list_activity_events(client_id, since)),
            self._guarded(client_id, SignalKind.SESSION, self.store.list_session_bookings(client_id)),
            self._guarded(client_id, SignalKind.WORKOUT, self.store.list_workout_completions(client_id, since)),
            self._guarded(client_id, SignalKind.CONTENT, self.store.list_content_views(client_id, since)),
            self._guarded(client_id, SignalKind.MILESTONE, self.store.list_milestone_unlocks(client_id, since)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        activities, bookings, workouts, content_views, milestones = results
        return SignalSnapshot(
            activities=list(activities),
            bookings=list(bookings),
            workouts=list(workouts),
            content_views=list(content_views),
            milestones=list(milestones),
        )

    @staticmethod
    async def _guarded(client_id: str, kind: SignalKind, fetch: Awaitable[T]) -> T:
        try:
            return await fetch
        except Exception as e:
            raise SignalFetchError(client_id, kind, e) from e
