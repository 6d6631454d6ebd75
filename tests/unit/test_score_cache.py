from datetime import timedelta

from engagement.features.client_engagement.cache.score_cache import ScoreCache
from engagement.features.client_engagement.domain.models import ChurnRisk, EngagementScore


def _score(client_id, now, overall=50):
    return EngagementScore(
        client_id=client_id,
        client_name=client_id.upper(),
        client_contact_address=None,
        activity_score=0.0,
        session_score=0.0,
        workout_score=0.0,
        content_score=0.0,
        milestone_score=0.0,
        overall_score=overall,
        churn_risk=ChurnRisk.MEDIUM,
        last_activity_at=now,
        days_since_last_activity=0,
        computed_at=now,
    )


def test_empty_cache_info(now):
    cache = ScoreCache()

    info = cache.info()

    assert info.count == 0
    assert info.last_computed_at is None
    assert cache.list_all() == []
    assert cache.get("c1") is None
    assert cache.is_stale(timedelta(hours=1), now) is True


def test_replace_publishes_full_pass(now):
    cache = ScoreCache()

    cache.replace([_score("c1", now), _score("c2", now)], now)

    assert cache.get("c1").client_name == "C1"
    assert {s.client_id for s in cache.list_all()} == {"c1", "c2"}
    assert cache.info().count == 2
    assert cache.info().last_computed_at == now


def test_replace_drops_previous_entries(now):
    cache = ScoreCache()
    cache.replace([_score("c1", now), _score("c2", now)], now)

    cache.replace([_score("c2", now, overall=80)], now + timedelta(minutes=5))

    assert cache.get("c1") is None
    assert cache.get("c2").overall_score == 80
    assert cache.info().count == 1


def test_earlier_reads_are_not_affected_by_replace(now):
    cache = ScoreCache()
    cache.replace([_score("c1", now)], now)
    before = cache.list_all()

    cache.replace([], now + timedelta(minutes=1))

    assert [s.client_id for s in before] == ["c1"]
    assert cache.list_all() == []


def test_staleness_is_decided_by_caller(now):
    cache = ScoreCache()
    cache.replace([_score("c1", now)], now)

    assert cache.is_stale(timedelta(hours=1), now + timedelta(minutes=30)) is False
    assert cache.is_stale(timedelta(hours=1), now + timedelta(hours=2)) is True
    # Stale entries are still served; the cache never expires them itself
    assert cache.get("c1") is not None
