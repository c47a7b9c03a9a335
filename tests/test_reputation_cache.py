# mypy: ignore-errors
"""Tests for the reputation summary cache."""

import logging
from unittest.mock import MagicMock

import redis

from hexfeed.schemas.reputation import ReputationSummary
from hexfeed.services.reputation_cache import ReputationCache


def _summary() -> ReputationSummary:
    return ReputationSummary(
        id=7,
        name="Author",
        avatar=None,
        reliability_score=62.1,
        total_views=10,
        total_likes=1,
        total_dislikes=0,
        posts=[{"id": 3, "view_count": 10, "like_count": 1, "dislike_count": 0}],
        tier="Trusted",
        color="#F59E0B",
        stars=4,
        badge="⭐⭐⭐⭐",
        engagement_rate="10.0%",
        post_count=1,
    )


def test_miss_returns_none() -> None:
    client = MagicMock()
    client.get.return_value = None
    cache = ReputationCache(client, enabled=True, ttl_seconds=60)

    assert cache.get(7) is None
    client.get.assert_called_once_with("reputation:7")


def test_set_then_hit_round_trips_summary() -> None:
    client = MagicMock()
    cache = ReputationCache(client, enabled=True, ttl_seconds=60)
    summary = _summary()

    cache.set(7, summary)
    key, payload = client.set.call_args.args
    assert key == "reputation:7"
    assert client.set.call_args.kwargs == {"ex": 60}

    client.get.return_value = payload
    assert cache.get(7) == summary


def test_invalidate_deletes_key() -> None:
    client = MagicMock()
    cache = ReputationCache(client, enabled=True, ttl_seconds=60)

    cache.invalidate(7)
    client.delete.assert_called_once_with("reputation:7")


def test_redis_errors_degrade_to_miss(caplog) -> None:
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    cache = ReputationCache(client, enabled=True, ttl_seconds=60)

    with caplog.at_level(logging.WARNING, logger="hexfeed.services.reputation_cache"):
        assert cache.get(7) is None
        cache.set(7, _summary())

    assert "read failed" in caplog.text
    assert "write failed" in caplog.text


def test_malformed_entry_is_dropped() -> None:
    client = MagicMock()
    client.get.return_value = b"{not json"
    cache = ReputationCache(client, enabled=True, ttl_seconds=60)

    assert cache.get(7) is None
    client.delete.assert_called_once_with("reputation:7")


def test_disabled_cache_never_touches_redis() -> None:
    client = MagicMock()
    cache = ReputationCache(client, enabled=False)

    assert cache.get(7) is None
    cache.set(7, _summary())
    cache.invalidate(7)
    client.get.assert_not_called()
    client.set.assert_not_called()
    client.delete.assert_not_called()
