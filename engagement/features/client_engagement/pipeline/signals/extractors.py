"""
Signal extractors.

One pure function per signal variant, each mapping a client's records
to a 0-100 sub-score. Records older than ``since`` are ignored so the
functions stay correct even when the store did not filter by time.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from engagement.features.client_engagement.domain.models import (
    ActivityEvent,
    ContentView,
    MilestoneUnlock,
    SessionBooking,
    SignalKind,
    SignalSnapshot,
    WorkoutCompletion,
)

MAX_SCORE = 100.0

ACTIVITY_TARGET = 50
SESSION_BOOKING_TARGET = 10
WORKOUT_TARGET = 20
CONTENT_COMPLETION_TARGET = 10
CONTENT_WATCH_SECONDS_TARGET = 3600.0
MILESTONE_TARGET = 5


def _saturating(count: float, target: float, ceiling: float = MAX_SCORE) -> float:
    """Linear ramp from 0 to ``ceiling`` reached at ``target``."""
    if count <= 0:
        return 0.0
    return min(count / target, 1.0) * ceiling


def activity_sub_score(events: Sequence[ActivityEvent], since: datetime) -> float:
    recent = sum(1 for event in events if event.timestamp >= since)
    return _saturating(recent, ACTIVITY_TARGET)


def session_sub_score(bookings: Sequence[SessionBooking], since: datetime) -> float:
    """
    Booking volume (half) plus attendance rate (half).

    Only bookings whose linked session still resolves and was scheduled
    inside the window count, for both the booked and attended totals.
    """
    recent = [
        booking
        for booking in bookings
        if booking.linked_session is not None and booking.linked_session.scheduled_at >= since
    ]
    booked = len(recent)
    if booked == 0:
        return 0.0

    attended = sum(1 for booking in recent if booking.attended)
    booking_component = _saturating(booked, SESSION_BOOKING_TARGET, ceiling=50.0)
    attendance_rate = attended / booked * 100.0
    attendance_component = attendance_rate * 0.5
    return min(booking_component + attendance_component, MAX_SCORE)


def workout_sub_score(completions: Sequence[WorkoutCompletion], since: datetime) -> float:
    recent = sum(1 for completion in completions if completion.completed_at >= since)
    return _saturating(recent, WORKOUT_TARGET)


def content_sub_score(views: Sequence[ContentView], since: datetime) -> float:
    recent = [view for view in views if view.last_watched_at >= since]
    if not recent:
        return 0.0

    completed = sum(1 for view in recent if view.completed)
    watched_seconds = sum(max(view.watched_seconds, 0.0) for view in recent)

    completion_component = _saturating(completed, CONTENT_COMPLETION_TARGET, ceiling=50.0)
    watch_component = _saturating(watched_seconds, CONTENT_WATCH_SECONDS_TARGET, ceiling=50.0)
    return completion_component + watch_component


def milestone_sub_score(unlocks: Sequence[MilestoneUnlock], since: datetime) -> float:
    recent = sum(1 for unlock in unlocks if unlock.unlocked_at >= since)
    return _saturating(recent, MILESTONE_TARGET)


Extractor = Callable[[Sequence, datetime], float]

EXTRACTORS: dict[SignalKind, Extractor] = {
    SignalKind.ACTIVITY: activity_sub_score,
    SignalKind.SESSION: session_sub_score,
    SignalKind.WORKOUT: workout_sub_score,
    SignalKind.CONTENT: content_sub_score,
    SignalKind.MILESTONE: milestone_sub_score,
}


def extract_sub_scores(snapshot: SignalSnapshot, since: datetime) -> dict[SignalKind, float]:
    """Run every extractor over its own record set."""
    return {kind: extractor(snapshot.records_for(kind), since) for kind, extractor in EXTRACTORS.items()}
