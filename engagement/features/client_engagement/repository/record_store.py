"""
Record store access for engagement scoring.

RecordStore is the read-only contract the scorer and batch engine depend
on. PostgresRecordStore implements it with raw SQL over the shared pool.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Protocol

from engagement.db.helpers import fetch_all, fetch_one
from engagement.features.client_engagement.domain.models import (
    ActivityEvent,
    Client,
    ContentView,
    LinkedSession,
    MilestoneUnlock,
    SessionBooking,
    WorkoutCompletion,
)
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RecordStore(Protocol):
    async def list_clients(self) -> list[Client]: ...

    async def get_client(self, client_id: str) -> Client | None: ...

    async def list_activity_events(self, client_id: str, since: datetime) -> list[ActivityEvent]: ...

    async def list_session_bookings(self, client_id: str) -> list[SessionBooking]: ...

    async def list_workout_completions(
        self, client_id: str, since: datetime
    ) -> list[WorkoutCompletion]: ...

    async def list_content_views(self, client_id: str, since: datetime) -> list[ContentView]: ...

    async def list_milestone_unlocks(self, client_id: str, since: datetime) -> list[MilestoneUnlock]: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _row_to_client(row: dict[str, Any]) -> Client:
    return Client(id=str(row["id"]), name=row.get("name") or "", contact_address=row.get("email"))


class PostgresRecordStore:
    """Raw SQL reads against the fitness platform tables."""

    async def list_clients(self) -> list[Client]:
        rows = await fetch_all("SELECT id, name, email FROM clients ORDER BY created_at ASC, id ASC")
        return [_row_to_client(row) for row in rows]

    async def get_client(self, client_id: str) -> Client | None:
        row = await fetch_one("SELECT id, name, email FROM clients WHERE id = %s", (client_id,))
        return _row_to_client(row) if row else None

    async def list_activity_events(self, client_id: str, since: datetime) -> list[ActivityEvent]:
        query = """
            SELECT timestamp
            FROM client_activities
            WHERE client_id = %s
              AND timestamp >= %s
        """
        rows = await fetch_all(query, (client_id, since))
        return [ActivityEvent(client_id=client_id, timestamp=_as_utc(row["timestamp"])) for row in rows]

    async def list_session_bookings(self, client_id: str) -> list[SessionBooking]:
        # LEFT JOIN: bookings whose session was deleted come back with NULL session columns
        query = """
            SELECT
                sc.session_id,
                sc.attended,
                sc.booked_at,
                ls.id AS linked_session_id,
                ls.scheduled_at
            FROM session_clients sc
            LEFT JOIN live_sessions ls ON ls.id = sc.session_id
            WHERE sc.client_id = %s
        """
        rows = await fetch_all(query, (client_id,))
        bookings: list[SessionBooking] = []
        for row in rows:
            linked = None
            if row.get("linked_session_id") is not None and row.get("scheduled_at") is not None:
                linked = LinkedSession(
                    session_id=str(row["linked_session_id"]),
                    scheduled_at=_as_utc(row["scheduled_at"]),
                )
            bookings.append(
                SessionBooking(
                    client_id=client_id,
                    session_id=str(row["session_id"]),
                    attended=bool(row.get("attended")),
                    booked_at=_as_utc(row["booked_at"]),
                    linked_session=linked,
                )
            )
        return bookings

    async def list_workout_completions(
        self, client_id: str, since: datetime
    ) -> list[WorkoutCompletion]:
        query = """
            SELECT completed_at
            FROM workout_sessions
            WHERE client_id = %s
              AND completed_at >= %s
        """
        rows = await fetch_all(query, (client_id, since))
        return [
            WorkoutCompletion(client_id=client_id, completed_at=_as_utc(row["completed_at"]))
            for row in rows
        ]

    async def list_content_views(self, client_id: str, since: datetime) -> list[ContentView]:
        query = """
            SELECT completed, watched_duration, last_watched_at
            FROM video_progress
            WHERE client_id = %s
              AND last_watched_at >= %s
        """
        rows = await fetch_all(query, (client_id, since))
        return [
            ContentView(
                client_id=client_id,
                completed=bool(row.get("completed")),
                watched_seconds=float(row.get("watched_duration") or 0),
                last_watched_at=_as_utc(row["last_watched_at"]),
            )
            for row in rows
        ]

    async def list_milestone_unlocks(self, client_id: str, since: datetime) -> list[MilestoneUnlock]:
        query = """
            SELECT unlocked_at
            FROM achievements
            WHERE client_id = %s
              AND unlocked_at >= %s
        """
        rows = await fetch_all(query, (client_id, since))
        return [
            MilestoneUnlock(client_id=client_id, unlocked_at=_as_utc(row["unlocked_at"]))
            for row in rows
        ]
