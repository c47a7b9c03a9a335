# src/hexfeed/models/user.py
"""SQLAlchemy model for feed authors and their reputation aggregates."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hexfeed.db.session import Base
from hexfeed.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post

DEFAULT_RELIABILITY_SCORE = 50.0


class User(Base):
    """Author identity plus the denormalized reputation state.

    ``reliability_score`` is only ever written by a full recomputation; the
    ``total_*`` counters are sums over the author's non-deleted posts as of
    that recomputation.
    """

    __tablename__ = "user"
    __table_args__ = (
        CheckConstraint(
            "reliability_score >= 0 AND reliability_score <= 100",
            name="ck_user_reliability_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)

    reliability_score: Mapped[float] = mapped_column(
        Float, nullable=False, default=DEFAULT_RELIABILITY_SCORE
    )
    total_likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    posts: Mapped[list[Post]] = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
    )
