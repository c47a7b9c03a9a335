"""Reliability score arithmetic.

Everything in this module is a pure function of its arguments so that a
recomputation run twice over the same posts yields the same score.

Score pipeline for one author::

    decay_i   = exp(-0.01 * age_days_i)
    ratio_i   = likes_i / views_i - dislikes_i / views_i   (0 when views_i < 3)
    positive  = sum(|ratio_i| * decay_i)  for ratio_i > 0
    negative  = sum(|ratio_i| * decay_i)  for ratio_i < 0
    scaling   = 50 / (1 + total_engagement / 100)
    raw       = 50 + (positive - negative) * scaling
    score     = 100 / (1 + exp(-(raw - 50) / 10)), clamped to [0, 100]
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from hexfeed.db.time import as_utc

DECAY_LAMBDA = 0.01
MILLISECONDS_PER_DAY = 86_400_000
MIN_VIEWS = 3
NEUTRAL_SCORE = 50.0
SCALING_BASE = 50.0
ENGAGEMENT_DAMPING = 100.0
SIGMOID_SLOPE = 10.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0
# Largest argument math.exp() accepts without overflowing, with headroom.
MAX_EXP_ARGUMENT = 700.0


@dataclass(frozen=True)
class TierInfo:
    """Display band derived from a score."""

    tier: str
    color: str
    stars: int
    badge: str


# (inclusive upper bound, tier)
TIERS: tuple[tuple[float, TierInfo], ...] = (
    (20.0, TierInfo("New", "#9CA3AF", 1, "⭐")),
    (40.0, TierInfo("Emerging", "#3B82F6", 2, "⭐⭐")),
    (60.0, TierInfo("Reliable", "#10B981", 3, "⭐⭐⭐")),
    (80.0, TierInfo("Trusted", "#F59E0B", 4, "⭐⭐⭐⭐")),
)
TOP_TIER = TierInfo("Expert", "#8B5CF6", 5, "⭐⭐⭐⭐⭐")


@dataclass(frozen=True)
class PostEngagement:
    """Snapshot of the engagement numbers of a single post."""

    likes: int
    dislikes: int
    views: int
    created_at: datetime


@dataclass(frozen=True)
class ScoreBreakdown:
    """Intermediate values of one recomputation pass."""

    positive_weight: float
    negative_weight: float
    total_engagement: int
    scaling_factor: float
    raw_score: float
    score: float


def age_in_days(created_at: datetime, now: datetime) -> float:
    """Return the fractional age in days between ``created_at`` and ``now``."""
    delta = as_utc(now) - as_utc(created_at)
    return (delta.total_seconds() * 1000) / MILLISECONDS_PER_DAY


def time_decay(created_at: datetime, now: datetime) -> float:
    """Return ``exp(-λ·age_days)``.

    A timestamp in the future yields a factor above 1; it is not clamped,
    but the exponent is capped so a wildly wrong timestamp cannot overflow.
    """
    exponent = -DECAY_LAMBDA * age_in_days(created_at, now)
    return math.exp(min(exponent, MAX_EXP_ARGUMENT))


def engagement_ratio(likes: int, dislikes: int, views: int) -> float:
    """Return the signed net like rate of a post.

    Posts seen fewer than ``MIN_VIEWS`` times are not evidence either way.
    """
    if views < MIN_VIEWS:
        return 0.0

    effective_views = max(views, 1)
    return likes / effective_views - dislikes / effective_views


def scaling_factor(total_engagement: int) -> float:
    """Shrink the per-weight multiplier as an author's total engagement grows."""
    return SCALING_BASE / (1 + total_engagement / ENGAGEMENT_DAMPING)


def raw_score(positive_weight: float, negative_weight: float, total_engagement: int) -> float:
    return NEUTRAL_SCORE + (positive_weight - negative_weight) * scaling_factor(total_engagement)


def clamp_score(score: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def normalize_score(raw: float) -> float:
    """Map a raw score onto 0-100 with a sigmoid centred on the neutral score."""
    exponent = -(raw - NEUTRAL_SCORE) / SIGMOID_SLOPE
    # exp() overflows for very negative raw scores; the limit there is 0.
    if exponent > MAX_EXP_ARGUMENT:
        return MIN_SCORE
    return clamp_score(MAX_SCORE / (1 + math.exp(exponent)))


def get_tier_info(score: float) -> TierInfo:
    """Return the tier whose inclusive upper bound first covers ``score``."""
    for upper_bound, info in TIERS:
        if score <= upper_bound:
            return info
    return TOP_TIER


def compute_reliability(posts: Iterable[PostEngagement], now: datetime) -> ScoreBreakdown:
    """Run the full scoring pass over an author's live posts."""
    positive_weight = 0.0
    negative_weight = 0.0
    total_engagement = 0

    for post in posts:
        decay = time_decay(post.created_at, now)
        views = max(post.views, 1)
        ratio = engagement_ratio(post.likes, post.dislikes, views)
        total_engagement += post.likes + post.dislikes

        if ratio > 0:
            positive_weight += abs(ratio) * decay
        else:
            negative_weight += abs(ratio) * decay

    raw = raw_score(positive_weight, negative_weight, total_engagement)
    return ScoreBreakdown(
        positive_weight=positive_weight,
        negative_weight=negative_weight,
        total_engagement=total_engagement,
        scaling_factor=scaling_factor(total_engagement),
        raw_score=raw,
        score=normalize_score(raw),
    )
