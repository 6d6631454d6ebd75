"""
Tests for the engagement analytics endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from engagement.features.client_engagement.services.engagement_service import (
    EngagementService,
    get_engagement_service,
)
from engagement.main import app


@pytest.fixture
def client_for(now):
    def _build(store):
        service = EngagementService(store, clock=lambda: now)
        app.dependency_overrides[get_engagement_service] = lambda: service
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()


def test_healthz_endpoint():
    response = TestClient(app).get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_run_then_read_cache(client_for, engaged_store):
    client = client_for(engaged_store)

    run = client.post("/analytics/engagement/run")
    assert run.status_code == 200
    assert run.json()["total_count"] == 1

    scores = client.get("/analytics/engagement/scores").json()
    assert scores["total_count"] == 1
    assert scores["scores"][0]["client_id"] == "c1"

    single = client.get("/analytics/engagement/scores/c1")
    assert single.status_code == 200
    body = single.json()
    assert body["overall_score"] == 70
    assert body["churn_risk"] == "low"
    assert body["insights"][0] == "Highly engaged user - excellent retention"

    cache = client.get("/analytics/engagement/cache").json()
    assert cache["cached_scores"] == 1
    assert cache["last_computed_at"] is not None


def test_unknown_client_returns_404(client_for, fake_store):
    client = client_for(fake_store)

    response = client.get("/analytics/engagement/scores/missing")

    assert response.status_code == 404


def test_report_endpoint(client_for, engaged_store):
    engaged_store.add_client("c2")
    client = client_for(engaged_store)

    response = client.get("/analytics/engagement/report")

    assert response.status_code == 200
    data = response.json()
    assert data["total_clients"] == 2
    assert data["churn_risk_distribution"] == {"low": 1, "medium": 0, "high": 1}
    assert data["top_engaged_clients"][0]["client_id"] == "c1"
    assert data["low_engaged_clients"][0]["days_since_last_activity"] == 999


def test_report_endpoint_fatal_error_returns_503(client_for, fake_store):
    fake_store.list_clients_error = RuntimeError("database unavailable")
    client = client_for(fake_store)

    response = client.get("/analytics/engagement/report")

    assert response.status_code == 503
