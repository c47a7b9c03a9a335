"""Read-through cache for reputation summaries.

The scoring engine never reads from this cache. Callers read summaries
through it and must invalidate an author's entry whenever a recomputation
changes that author's score.
"""

from __future__ import annotations

import logging
from typing import Any, Final

import redis
from pydantic import ValidationError

from hexfeed.core.settings import settings
from hexfeed.schemas.reputation import ReputationSummary

logger = logging.getLogger(__name__)

_KEY_PREFIX: Final[str] = "reputation"


class ReputationCache:
    """Redis-backed cache of :class:`ReputationSummary` payloads.

    Redis errors are logged and treated as cache misses so that the database
    remains the source of truth.
    """

    def __init__(
        self,
        client: Any | None = None,
        *,
        enabled: bool | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self.enabled = settings.reputation_cache_enabled if enabled is None else enabled
        self.ttl_seconds = (
            settings.reputation_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._redis = client
        if self._redis is None and self.enabled:
            self._redis = redis.from_url(settings.redis_url)  # type: ignore[no-untyped-call]

    @staticmethod
    def key_for(user_id: int) -> str:
        return f"{_KEY_PREFIX}:{user_id}"

    def get(self, user_id: int) -> ReputationSummary | None:
        """Return the cached summary for ``user_id`` or ``None`` on a miss."""
        if not self.enabled or self._redis is None:
            return None
        try:
            raw = self._redis.get(self.key_for(user_id))
        except redis.RedisError as exc:
            logger.warning("Reputation cache read failed for user %s: %s", user_id, exc)
            return None
        if raw is None:
            return None
        try:
            return ReputationSummary.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed cached reputation for user %s", user_id)
            self.invalidate(user_id)
            return None

    def set(self, user_id: int, summary: ReputationSummary) -> None:
        if not self.enabled or self._redis is None or self.ttl_seconds <= 0:
            return
        try:
            self._redis.set(self.key_for(user_id), summary.model_dump_json(), ex=self.ttl_seconds)
        except redis.RedisError as exc:
            logger.warning("Reputation cache write failed for user %s: %s", user_id, exc)

    def invalidate(self, user_id: int) -> None:
        """Drop the cached summary of ``user_id``."""
        if not self.enabled or self._redis is None:
            return
        try:
            self._redis.delete(self.key_for(user_id))
        except redis.RedisError as exc:
            logger.warning("Reputation cache invalidation failed for user %s: %s", user_id, exc)


_CACHE: ReputationCache | None = None


def get_reputation_cache() -> ReputationCache:
    """Return the process-wide reputation cache."""
    global _CACHE
    if _CACHE is None:
        _CACHE = ReputationCache()
    return _CACHE
