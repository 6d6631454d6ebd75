from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from engagement.features.client_engagement.repository.record_store import PostgresRecordStore

MODULE = "engagement.features.client_engagement.repository.record_store"


@pytest.mark.asyncio
async def test_session_bookings_keep_unresolved_sessions_unlinked(monkeypatch):
    booked_at = datetime(2026, 10, 1, 9, 0, tzinfo=UTC)
    rows = [
        {
            "session_id": "s1",
            "attended": True,
            "booked_at": booked_at,
            "linked_session_id": "s1",
            "scheduled_at": booked_at + timedelta(days=2),
        },
        {
            "session_id": "s2",
            "attended": True,
            "booked_at": booked_at,
            "linked_session_id": None,
            "scheduled_at": None,
        },
    ]
    fetch_all_mock = AsyncMock(return_value=rows)
    monkeypatch.setattr(f"{MODULE}.fetch_all", fetch_all_mock)

    bookings = await PostgresRecordStore().list_session_bookings("c1")

    assert bookings[0].linked_session.scheduled_at == booked_at + timedelta(days=2)
    assert bookings[1].linked_session is None
    args, _ = fetch_all_mock.await_args
    assert args[1] == ("c1",)


@pytest.mark.asyncio
async def test_naive_timestamps_are_treated_as_utc(monkeypatch):
    monkeypatch.setattr(
        f"{MODULE}.fetch_all",
        AsyncMock(return_value=[{"timestamp": datetime(2026, 10, 18, 8, 30)}]),
    )
    since = datetime(2026, 9, 19, tzinfo=UTC)

    events = await PostgresRecordStore().list_activity_events("c1", since)

    assert events[0].timestamp == datetime(2026, 10, 18, 8, 30, tzinfo=UTC)


@pytest.mark.asyncio
async def test_content_views_default_missing_duration(monkeypatch):
    at = datetime(2026, 10, 18, tzinfo=UTC)
    monkeypatch.setattr(
        f"{MODULE}.fetch_all",
        AsyncMock(
            return_value=[{"completed": None, "watched_duration": None, "last_watched_at": at}]
        ),
    )

    views = await PostgresRecordStore().list_content_views("c1", at - timedelta(days=30))

    assert views[0].completed is False
    assert views[0].watched_seconds == 0.0


@pytest.mark.asyncio
async def test_get_client_returns_none_when_missing(monkeypatch):
    monkeypatch.setattr(f"{MODULE}.fetch_one", AsyncMock(return_value=None))

    assert await PostgresRecordStore().get_client("ghost") is None


@pytest.mark.asyncio
async def test_list_clients_maps_email_to_contact_address(monkeypatch):
    monkeypatch.setattr(
        f"{MODULE}.fetch_all",
        AsyncMock(return_value=[{"id": 7, "name": "Sam", "email": "sam@example.com"}]),
    )

    clients = await PostgresRecordStore().list_clients()

    assert clients[0].id == "7"
    assert clients[0].contact_address == "sam@example.com"
