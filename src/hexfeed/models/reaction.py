# src/hexfeed/models/reaction.py
"""Models capturing like/dislike reactions on posts."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hexfeed.db.session import Base
from hexfeed.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post


class ReactionType(str, enum.Enum):
    """The two reactions a reader can leave on a post."""

    LIKE = "like"
    DISLIKE = "dislike"


class PostReaction(Base):
    """Per-user reaction on a post.

    At most one row exists per (user, post); switching type updates the row in
    place and keeps ``created_at``.
    """

    __tablename__ = "post_reaction"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_post_reaction_user_post"),
        # Both rolling-window counts used by the abuse checks filter on created_at.
        Index("ix_post_reaction_user_created", "user_id", "created_at"),
        Index("ix_post_reaction_post_created", "post_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[ReactionType] = mapped_column(
        Enum(
            ReactionType,
            name="reaction_type",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="reactions")
