"""Reputation-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from hexfeed.models.reaction import ReactionType


class ReactionCreate(BaseModel):
    """Schema for adding, switching or toggling off a reaction."""

    type: ReactionType = Field(..., description="'like' or 'dislike'")


class TierInfoResponse(BaseModel):
    """Display band for a reliability score."""

    tier: str
    color: str
    stars: int = Field(..., ge=1, le=5)
    badge: str

    model_config = ConfigDict(from_attributes=True)


class ReputationUpdate(BaseModel):
    """Score movement produced by a recomputation of the post author."""

    old_score: float
    new_score: float
    change: float
    tier: str
    color: str


class PostStats(BaseModel):
    """Denormalized counters of one live post."""

    id: int
    view_count: int
    like_count: int
    dislike_count: int

    model_config = ConfigDict(from_attributes=True)


class ReputationSummary(BaseModel):
    """Public reputation card of a user."""

    id: int
    name: str
    avatar: str | None = None
    reliability_score: float = Field(..., ge=0, le=100)
    total_views: int
    total_likes: int
    total_dislikes: int
    posts: list[PostStats]
    tier: str
    color: str
    stars: int
    badge: str
    engagement_rate: str = Field(..., description="Reactions per view, e.g. '12.5%'")
    post_count: int


class ViewResponse(BaseModel):
    success: bool = True
