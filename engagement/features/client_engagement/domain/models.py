"""
Domain models for client engagement scoring.

Signal records are read-only snapshots of what the record store holds for
one client. Scores and reports are produced by the engine and never
mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class SignalKind(str, Enum):
    ACTIVITY = "activity"
    SESSION = "session"
    WORKOUT = "workout"
    CONTENT = "content"
    MILESTONE = "milestone"


class ChurnRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True, frozen=True)
class Client:
    id: str
    name: str
    contact_address: str | None


@dataclass(slots=True, frozen=True)
class ActivityEvent:
    """A login or in-app activity event."""

    kind: ClassVar[SignalKind] = SignalKind.ACTIVITY

    client_id: str
    timestamp: datetime


@dataclass(slots=True, frozen=True)
class LinkedSession:
    session_id: str
    scheduled_at: datetime


@dataclass(slots=True, frozen=True)
class SessionBooking:
    """A booking for a live session; linked_session is None when the join failed."""

    kind: ClassVar[SignalKind] = SignalKind.SESSION

    client_id: str
    session_id: str
    attended: bool
    booked_at: datetime
    linked_session: LinkedSession | None


@dataclass(slots=True, frozen=True)
class WorkoutCompletion:
    kind: ClassVar[SignalKind] = SignalKind.WORKOUT

    client_id: str
    completed_at: datetime


@dataclass(slots=True, frozen=True)
class ContentView:
    """Progress on a single piece of video content."""

    kind: ClassVar[SignalKind] = SignalKind.CONTENT

    client_id: str
    completed: bool
    watched_seconds: float
    last_watched_at: datetime


@dataclass(slots=True, frozen=True)
class MilestoneUnlock:
    kind: ClassVar[SignalKind] = SignalKind.MILESTONE

    client_id: str
    unlocked_at: datetime


SignalRecord = ActivityEvent | SessionBooking | WorkoutCompletion | ContentView | MilestoneUnlock


@dataclass(slots=True)
class SignalSnapshot:
    """All five record sets fetched for one client in one pass."""

    activities: list[ActivityEvent] = field(default_factory=list)
    bookings: list[SessionBooking] = field(default_factory=list)
    workouts: list[WorkoutCompletion] = field(default_factory=list)
    content_views: list[ContentView] = field(default_factory=list)
    milestones: list[MilestoneUnlock] = field(default_factory=list)

    def records_for(self, kind: SignalKind) -> list[SignalRecord]:
        return {
            SignalKind.ACTIVITY: self.activities,
            SignalKind.SESSION: self.bookings,
            SignalKind.WORKOUT: self.workouts,
            SignalKind.CONTENT: self.content_views,
            SignalKind.MILESTONE: self.milestones,
        }[kind]

    def counts(self) -> dict[SignalKind, int]:
        return {kind: len(self.records_for(kind)) for kind in SignalKind}


@dataclass(slots=True, frozen=True)
class EngagementScore:
    client_id: str
    client_name: str
    client_contact_address: str | None
    activity_score: float
    session_score: float
    workout_score: float
    content_score: float
    milestone_score: float
    overall_score: int
    churn_risk: ChurnRisk
    last_activity_at: datetime | None
    days_since_last_activity: int
    computed_at: datetime
    insights: tuple[str, ...] = ()

    def sub_scores(self) -> dict[SignalKind, float]:
        return {
            SignalKind.ACTIVITY: self.activity_score,
            SignalKind.SESSION: self.session_score,
            SignalKind.WORKOUT: self.workout_score,
            SignalKind.CONTENT: self.content_score,
            SignalKind.MILESTONE: self.milestone_score,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "client_contact_address": self.client_contact_address,
            "activity_score": self.activity_score,
            "session_score": self.session_score,
            "workout_score": self.workout_score,
            "content_score": self.content_score,
            "milestone_score": self.milestone_score,
            "overall_score": self.overall_score,
            "churn_risk": self.churn_risk.value,
            "last_activity_at": self.last_activity_at.isoformat() if self.last_activity_at else None,
            "days_since_last_activity": self.days_since_last_activity,
            "computed_at": self.computed_at.isoformat(),
            "insights": list(self.insights),
        }


@dataclass(slots=True, frozen=True)
class CacheInfo:
    count: int
    last_computed_at: datetime | None


@dataclass(slots=True, frozen=True)
class ChurnRiskDistribution:
    low: int = 0
    medium: int = 0
    high: int = 0


@dataclass(slots=True, frozen=True)
class EngagementReport:
    total_clients: int
    active_clients: int
    at_risk_clients: int
    top_engaged_clients: tuple[EngagementScore, ...]
    low_engaged_clients: tuple[EngagementScore, ...]
    churn_risk_distribution: ChurnRiskDistribution
    average_engagement_score: int
    generated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_clients": self.total_clients,
            "active_clients": self.active_clients,
            "at_risk_clients": self.at_risk_clients,
            "top_engaged_clients": [s.to_dict() for s in self.top_engaged_clients],
            "low_engaged_clients": [s.to_dict() for s in self.low_engaged_clients],
            "churn_risk_distribution": {
                "low": self.churn_risk_distribution.low,
                "medium": self.churn_risk_distribution.medium,
                "high": self.churn_risk_distribution.high,
            },
            "average_engagement_score": self.average_engagement_score,
            "generated_at": self.generated_at.isoformat(),
        }
