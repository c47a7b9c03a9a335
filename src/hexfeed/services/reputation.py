"""Reliability-based reputation services for Hexfeed.

Reactions and views on a post feed the reliability score of the post's
author. Every reaction mutation triggers a full recomputation of that
author's score from their live posts; the arithmetic lives in
:mod:`hexfeed.services.scoring`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from threading import Lock, RLock
from weakref import WeakValueDictionary

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from hexfeed.core.exceptions import NotFoundError, RateLimitError, SelfReactionError
from hexfeed.core.settings import Settings, settings
from hexfeed.db.time import utcnow
from hexfeed.models import Post, PostReaction, ReactionType, User
from hexfeed.schemas.reputation import PostStats, ReputationSummary, ReputationUpdate
from hexfeed.services.scoring import (
    PostEngagement,
    TierInfo,
    compute_reliability,
    get_tier_info,
)

logger = logging.getLogger(__name__)

# Suspicion weights returned by detect_suspicious_activity.
BOT_WEIGHT = 0.1
SPIKE_WEIGHT = 0.5
NORMAL_WEIGHT = 1.0
# Reactions whose weight falls below this are refused outright.
MIN_ACCEPTED_WEIGHT = 0.5

_COUNTER_COLUMNS = {
    ReactionType.LIKE: "like_count",
    ReactionType.DISLIKE: "dislike_count",
}

DEFAULT_RECALCULATE_BATCH_SIZE = 500

# An entry disappears once no recomputation holds a reference to its lock.
_AUTHOR_LOCKS: WeakValueDictionary[int, RLock] = WeakValueDictionary()
_AUTHOR_LOCKS_GUARD = Lock()


def _author_lock(user_id: int) -> RLock:
    with _AUTHOR_LOCKS_GUARD:
        lock = _AUTHOR_LOCKS.get(user_id)
        if lock is None:
            lock = RLock()
            _AUTHOR_LOCKS[user_id] = lock
        return lock


def _adjust_counter(post: Post, reaction_type: ReactionType, delta: int) -> None:
    """Shift the denormalized counter for ``reaction_type``, never below zero."""
    column = _COUNTER_COLUMNS[reaction_type]
    setattr(post, column, max(0, getattr(post, column) + delta))


class ReputationService:
    """Service computing and persisting user reliability scores."""

    def __init__(
        self,
        db: Session,
        *,
        clock: Callable[[], datetime] = utcnow,
        config: Settings | None = None,
    ) -> None:
        self.db = db
        self.clock = clock
        self.config = config or settings

    # --- Lookups ----------------------------------------------------------------

    def _get_live_post(self, post_id: int) -> Post:
        post = self.db.scalar(
            select(Post).where(Post.id == post_id, Post.is_deleted.is_(False))
        )
        if post is None:
            raise NotFoundError("Post", post_id)
        return post

    def _live_posts(self, user_id: int) -> list[Post]:
        stmt = (
            select(Post)
            .where(Post.user_id == user_id, Post.is_deleted.is_(False))
            .order_by(Post.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.scalars(stmt))

    def _reaction_counts(self, user_id: int) -> dict[int, dict[ReactionType, int]]:
        """Count reaction rows per live post of ``user_id``, grouped by type."""
        stmt = (
            select(PostReaction.post_id, PostReaction.type, func.count())
            .join(Post, Post.id == PostReaction.post_id)
            .where(Post.user_id == user_id, Post.is_deleted.is_(False))
            .group_by(PostReaction.post_id, PostReaction.type)
        )
        counts: dict[int, dict[ReactionType, int]] = defaultdict(dict)
        for post_id, reaction_type, total in self.db.execute(stmt):
            counts[post_id][ReactionType(reaction_type)] = total
        return counts

    def author_of(self, post_id: int) -> int:
        """Return the author id of a live post."""
        return self._get_live_post(post_id).user_id

    @staticmethod
    def get_tier_info(score: float) -> TierInfo:
        """Return tier name, colour, stars and badge for ``score``."""
        return get_tier_info(score)

    # --- Abuse detection ----------------------------------------------------------

    def detect_suspicious_activity(self, post_id: int, user_id: int) -> float:
        """Weigh how likely an incoming reaction is automated or part of a brigade.

        Returns:
            ``BOT_WEIGHT`` when the user exceeds the hourly reaction limit (the
            attempted reaction included), ``SPIKE_WEIGHT`` when the post is
            receiving reactions far faster than it is being viewed, otherwise
            ``NORMAL_WEIGHT``.
        """
        window_start = self.clock() - timedelta(
            seconds=self.config.reputation_suspicion_window_seconds
        )

        recent_by_user = self.db.scalar(
            select(func.count())
            .select_from(PostReaction)
            .where(
                PostReaction.user_id == user_id,
                PostReaction.created_at >= window_start,
            )
        ) or 0
        if recent_by_user + 1 > self.config.reputation_bot_reaction_limit:
            return BOT_WEIGHT

        post = self.db.get(Post, post_id)
        if post is None:
            return NORMAL_WEIGHT

        recent_on_post = self.db.scalar(
            select(func.count())
            .select_from(PostReaction)
            .where(
                PostReaction.post_id == post_id,
                PostReaction.created_at >= window_start,
            )
        ) or 0
        recent_engagement_rate = recent_on_post / max(post.view_count, 1)
        if recent_engagement_rate > self.config.spike_engagement_rate:
            return SPIKE_WEIGHT

        return NORMAL_WEIGHT

    # --- Mutations ----------------------------------------------------------------

    def add_reaction(
        self,
        user_id: int,
        post_id: int,
        reaction_type: ReactionType,
    ) -> ReputationUpdate:
        """Add, switch or toggle off a reaction and rescore the post author.

        Raises:
            NotFoundError: If the post does not exist or was deleted, or the
                reacting user does not exist.
            SelfReactionError: If self-reactions are disabled and the caller
                authored the post.
            RateLimitError: If the caller looks automated.
        """
        reaction_type = ReactionType(reaction_type)
        post = self._get_live_post(post_id)
        if self.db.get(User, user_id) is None:
            raise NotFoundError("User", user_id)

        if not self.config.reputation_allow_self_reactions and post.user_id == user_id:
            raise SelfReactionError()

        weight = self.detect_suspicious_activity(post_id, user_id)
        if weight < MIN_ACCEPTED_WEIGHT:
            logger.warning(
                "Rejected reaction from user %s on post %s (suspicion weight %.1f)",
                user_id,
                post_id,
                weight,
            )
            raise RateLimitError(weight)
        if weight < NORMAL_WEIGHT:
            logger.warning(
                "Engagement burst on post %s; accepting reaction from user %s",
                post_id,
                user_id,
            )

        existing = self.db.scalar(
            select(PostReaction).where(
                PostReaction.user_id == user_id,
                PostReaction.post_id == post_id,
            )
        )

        if existing is None:
            self.db.add(
                PostReaction(
                    user_id=user_id,
                    post_id=post_id,
                    type=reaction_type,
                    created_at=self.clock(),
                )
            )
            _adjust_counter(post, reaction_type, +1)
        elif existing.type == reaction_type:
            self.db.delete(existing)
            _adjust_counter(post, reaction_type, -1)
        else:
            _adjust_counter(post, existing.type, -1)
            _adjust_counter(post, reaction_type, +1)
            existing.type = reaction_type

        self.db.commit()
        return self.recalculate_user_reliability(post.user_id)

    def increment_view_count(self, post_id: int) -> None:
        """Record one more view of a post.

        Viewers are not de-duplicated here; callers rate-limit upstream.
        """
        result = self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
        )
        if result.rowcount == 0:
            raise NotFoundError("Post", post_id)
        self.db.commit()

    # --- Recomputation ------------------------------------------------------------

    def recalculate_user_reliability(self, user_id: int) -> ReputationUpdate:
        """Recompute and persist the reliability score of ``user_id``.

        Recomputations for the same author are serialized in-process, and the
        user row is locked for the duration of the read-modify-write on
        databases that support ``SELECT ... FOR UPDATE``.
        """
        with _author_lock(user_id):
            user = self.db.scalar(
                select(User)
                .where(User.id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            if user is None:
                raise NotFoundError("User", user_id)

            old_score = user.reliability_score
            posts = self._live_posts(user_id)
            counts = self._reaction_counts(user_id)

            breakdown = compute_reliability(
                (
                    PostEngagement(
                        likes=counts[post.id].get(ReactionType.LIKE, 0),
                        dislikes=counts[post.id].get(ReactionType.DISLIKE, 0),
                        views=post.view_count,
                        created_at=post.created_at,
                    )
                    for post in posts
                ),
                self.clock(),
            )
            logger.debug("Score breakdown for user %s: %s", user_id, breakdown)

            user.reliability_score = breakdown.score
            user.total_likes = sum(post.like_count for post in posts)
            user.total_dislikes = sum(post.dislike_count for post in posts)
            user.total_views = sum(post.view_count for post in posts)
            self.db.commit()

        new_score = breakdown.score
        if new_score != old_score:
            logger.info(
                "Reliability of user %s moved %.2f -> %.2f",
                user_id,
                old_score,
                new_score,
            )

        tier_info = get_tier_info(new_score)
        return ReputationUpdate(
            old_score=old_score,
            new_score=new_score,
            change=new_score - old_score,
            tier=tier_info.tier,
            color=tier_info.color,
        )

    def recalculate_all(
        self, batch_size: int = DEFAULT_RECALCULATE_BATCH_SIZE
    ) -> Iterator[tuple[int, ReputationUpdate]]:
        """Recompute every user's score, paging user ids ``batch_size`` at a time.

        Results are yielded as soon as each user is committed, so a caller can
        act on finished users even if a later one fails. Users deleted while
        the pass runs are skipped.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be positive")

        last_id = 0
        while True:
            user_ids = list(
                self.db.scalars(
                    select(User.id)
                    .where(User.id > last_id)
                    .order_by(User.id)
                    .limit(batch_size)
                )
            )
            if not user_ids:
                return
            logger.debug("Recalculating batch of %d user(s) after id %s", len(user_ids), last_id)

            for user_id in user_ids:
                try:
                    result = self.recalculate_user_reliability(user_id)
                except NotFoundError:
                    logger.warning("User %s disappeared during recalculation; skipping", user_id)
                    continue
                yield user_id, result
            last_id = user_ids[-1]

    # --- Read path ----------------------------------------------------------------

    def get_user_reputation(self, user_id: int) -> ReputationSummary:
        """Return the public reputation card of ``user_id``."""
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        posts = self._live_posts(user_id)
        tier_info = get_tier_info(user.reliability_score)
        if user.total_views > 0:
            rate = (user.total_likes + user.total_dislikes) / user.total_views * 100
            engagement_rate = f"{rate:.1f}%"
        else:
            engagement_rate = "0.0%"

        return ReputationSummary(
            id=user.id,
            name=user.name,
            avatar=user.avatar,
            reliability_score=user.reliability_score,
            total_views=user.total_views,
            total_likes=user.total_likes,
            total_dislikes=user.total_dislikes,
            posts=[PostStats.model_validate(post) for post in posts],
            tier=tier_info.tier,
            color=tier_info.color,
            stars=tier_info.stars,
            badge=tier_info.badge,
            engagement_rate=engagement_rate,
            post_count=len(posts),
        )
