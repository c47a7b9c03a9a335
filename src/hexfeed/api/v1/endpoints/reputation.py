# src/hexfeed/api/v1/endpoints/reputation.py
"""Reputation endpoints: reactions, views and reliability summaries."""

from typing import Annotated, NoReturn

from fastapi import APIRouter, HTTPException, Path, status

from hexfeed.core.exceptions import (
    NotFoundError,
    RateLimitError,
    ReputationError,
    SelfReactionError,
)
from hexfeed.schemas.reputation import (
    ReactionCreate,
    ReputationSummary,
    ReputationUpdate,
    TierInfoResponse,
    ViewResponse,
)
from hexfeed.services.reputation import ReputationService
from hexfeed.services.reputation_cache import ReputationCache

from ..dependencies import CurrentUserDep, ReputationCacheDep, ReputationServiceDep

router = APIRouter(prefix="/reputation", tags=["reputation"])

ScorePath = Annotated[float, Path(ge=0, le=100)]


def _raise_http(exc: ReputationError) -> NoReturn:
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RateLimitError):
        code = status.HTTP_429_TOO_MANY_REQUESTS
    elif isinstance(exc, SelfReactionError):
        code = status.HTTP_403_FORBIDDEN
    else:  # pragma: no cover - every subclass is mapped above
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc


def _cached_summary(
    user_id: int,
    service: ReputationService,
    cache: ReputationCache,
) -> ReputationSummary:
    cached = cache.get(user_id)
    if cached is not None:
        return cached
    try:
        summary = service.get_user_reputation(user_id)
    except ReputationError as exc:
        _raise_http(exc)
    cache.set(user_id, summary)
    return summary


@router.post("/react/{post_id}", response_model=ReputationUpdate)
async def react_to_post(
    post_id: int,
    reaction: ReactionCreate,
    current_user: CurrentUserDep,
    service: ReputationServiceDep,
    cache: ReputationCacheDep,
) -> ReputationUpdate:
    """Add, switch or toggle off a like/dislike and return the author's score change."""
    try:
        author_id = service.author_of(post_id)
        result = service.add_reaction(current_user.id, post_id, reaction.type)
    except ReputationError as exc:
        _raise_http(exc)

    # Counters in the author's summary change even when the score does not.
    cache.invalidate(author_id)
    return result


@router.post("/view/{post_id}", response_model=ViewResponse)
async def view_post(
    post_id: int,
    current_user: CurrentUserDep,
    service: ReputationServiceDep,
) -> ViewResponse:
    """Increment the view count of a post."""
    try:
        service.increment_view_count(post_id)
    except ReputationError as exc:
        _raise_http(exc)
    return ViewResponse(success=True)


@router.get("/user/{user_id}", response_model=ReputationSummary)
async def get_user_reputation(
    user_id: int,
    current_user: CurrentUserDep,
    service: ReputationServiceDep,
    cache: ReputationCacheDep,
) -> ReputationSummary:
    """Get a user's reputation summary."""
    return _cached_summary(user_id, service, cache)


@router.get("/me", response_model=ReputationSummary)
async def get_my_reputation(
    current_user: CurrentUserDep,
    service: ReputationServiceDep,
    cache: ReputationCacheDep,
) -> ReputationSummary:
    """Get the authenticated user's reputation summary."""
    return _cached_summary(current_user.id, service, cache)


@router.post("/recalculate/{user_id}", response_model=ReputationUpdate)
async def recalculate_reputation(
    user_id: int,
    current_user: CurrentUserDep,
    service: ReputationServiceDep,
    cache: ReputationCacheDep,
) -> ReputationUpdate:
    """Recompute a user's reliability from scratch (maintenance)."""
    try:
        result = service.recalculate_user_reliability(user_id)
    except ReputationError as exc:
        _raise_http(exc)
    cache.invalidate(user_id)
    return result


@router.get("/tiers/{score}", response_model=TierInfoResponse)
async def get_tier(score: ScorePath) -> TierInfoResponse:
    """Describe the tier a score falls into."""
    return TierInfoResponse.model_validate(ReputationService.get_tier_info(score))
