import asyncio
from collections import defaultdict
from datetime import UTC, datetime, timedelta

import pytest

from engagement.features.client_engagement.domain.models import (
    ActivityEvent,
    Client,
    ContentView,
    LinkedSession,
    MilestoneUnlock,
    SessionBooking,
    SignalKind,
    WorkoutCompletion,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class FakeRecordStore:
    """In-memory RecordStore with per-client failure and delay injection."""

    def __init__(self):
        self.clients: dict[str, Client] = {}
        self.activities: dict[str, list[ActivityEvent]] = defaultdict(list)
        self.bookings: dict[str, list[SessionBooking]] = defaultdict(list)
        self.workouts: dict[str, list[WorkoutCompletion]] = defaultdict(list)
        self.content_views: dict[str, list[ContentView]] = defaultdict(list)
        self.milestones: dict[str, list[MilestoneUnlock]] = defaultdict(list)

        self.failures: dict[tuple[str, SignalKind], Exception] = {}
        self.delays: dict[str, float] = {}
        self.fetch_delays: dict[tuple[str, SignalKind], float] = {}
        self.missing: set[str] = set()
        self.list_clients_error: Exception | None = None
        self.get_client_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.fetches_in_flight = 0
        self.max_fetches_in_flight = 0

    # -- builders -------------------------------------------------------

    def add_client(self, client_id: str, name: str | None = None) -> Client:
        client = Client(
            id=client_id,
            name=name or f"Client {client_id}",
            contact_address=f"{client_id}@example.com",
        )
        self.clients[client_id] = client
        return client

    def add_activities(self, client_id: str, count: int, at: datetime) -> None:
        self.activities[client_id].extend(
            ActivityEvent(client_id=client_id, timestamp=at) for _ in range(count)
        )

    def add_bookings(
        self,
        client_id: str,
        count: int,
        *,
        scheduled_at: datetime | None,
        booked_at: datetime,
        attended: bool = True,
    ) -> None:
        for i in range(count):
            session_id = f"{client_id}-session-{len(self.bookings[client_id]) + i}"
            linked = (
                LinkedSession(session_id=session_id, scheduled_at=scheduled_at)
                if scheduled_at is not None
                else None
            )
            self.bookings[client_id].append(
                SessionBooking(
                    client_id=client_id,
                    session_id=session_id,
                    attended=attended,
                    booked_at=booked_at,
                    linked_session=linked,
                )
            )

    def add_workouts(self, client_id: str, count: int, at: datetime) -> None:
        self.workouts[client_id].extend(
            WorkoutCompletion(client_id=client_id, completed_at=at) for _ in range(count)
        )

    def add_content_view(
        self, client_id: str, *, completed: bool, watched_seconds: float, at: datetime
    ) -> None:
        self.content_views[client_id].append(
            ContentView(
                client_id=client_id,
                completed=completed,
                watched_seconds=watched_seconds,
                last_watched_at=at,
            )
        )

    def add_milestones(self, client_id: str, count: int, at: datetime) -> None:
        self.milestones[client_id].extend(
            MilestoneUnlock(client_id=client_id, unlocked_at=at) for _ in range(count)
        )

    # -- RecordStore ----------------------------------------------------

    async def list_clients(self) -> list[Client]:
        if self.list_clients_error:
            raise self.list_clients_error
        return list(self.clients.values())

    async def get_client(self, client_id: str) -> Client | None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.get_client_delay:
                await asyncio.sleep(self.get_client_delay)
        finally:
            self.in_flight -= 1

        if client_id in self.missing:
            return None
        return self.clients.get(client_id)

    async def _before_fetch(self, client_id: str, kind: SignalKind) -> None:
        self.fetches_in_flight += 1
        self.max_fetches_in_flight = max(self.max_fetches_in_flight, self.fetches_in_flight)
        try:
            delay = self.delays.get(client_id, 0.0) + self.fetch_delays.get((client_id, kind), 0.0)
            if delay:
                await asyncio.sleep(delay)
            error = self.failures.get((client_id, kind))
            if error:
                raise error
        finally:
            self.fetches_in_flight -= 1

    async def list_activity_events(self, client_id: str, since: datetime) -> list[ActivityEvent]:
        await self._before_fetch(client_id, SignalKind.ACTIVITY)
        return [e for e in self.activities[client_id] if e.timestamp >= since]

    async def list_session_bookings(self, client_id: str) -> list[SessionBooking]:
        await self._before_fetch(client_id, SignalKind.SESSION)
        return list(self.bookings[client_id])

    async def list_workout_completions(
        self, client_id: str, since: datetime
    ) -> list[WorkoutCompletion]:
        await self._before_fetch(client_id, SignalKind.WORKOUT)
        return [w for w in self.workouts[client_id] if w.completed_at >= since]

    async def list_content_views(self, client_id: str, since: datetime) -> list[ContentView]:
        await self._before_fetch(client_id, SignalKind.CONTENT)
        return [v for v in self.content_views[client_id] if v.last_watched_at >= since]

    async def list_milestone_unlocks(self, client_id: str, since: datetime) -> list[MilestoneUnlock]:
        await self._before_fetch(client_id, SignalKind.MILESTONE)
        return [m for m in self.milestones[client_id] if m.unlocked_at >= since]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fake_store():
    return FakeRecordStore()


@pytest.fixture
def engaged_store(fake_store, now):
    """Store whose client 'c1' hits every target except content and milestones."""
    fake_store.add_client("c1", name="Avery")
    fake_store.add_activities("c1", 50, now - timedelta(days=1))
    fake_store.add_bookings(
        "c1", 10, scheduled_at=now - timedelta(days=2), booked_at=now - timedelta(days=3)
    )
    fake_store.add_workouts("c1", 20, now - timedelta(days=1))
    return fake_store
