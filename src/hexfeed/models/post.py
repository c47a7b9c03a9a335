# src/hexfeed/models/post.py
"""SQLAlchemy model for posts pinned to a map cell."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hexfeed.db.session import Base
from hexfeed.db.time import utcnow

if TYPE_CHECKING:
    from .reaction import PostReaction
    from .user import User


class Post(Base):
    """Content posted by a user into a geographic cell.

    Counters are denormalized copies of the reaction rows and are kept
    consistent by the reaction service. Deleted posts stay in the table but
    drop out of reputation recomputation.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("view_count >= 0", name="ck_post_view_count"),
        CheckConstraint("like_count >= 0", name="ck_post_like_count"),
        CheckConstraint("dislike_count >= 0", name="ck_post_dislike_count"),
        Index("ix_post_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Opaque H3 cell identifier; the reputation engine never reads it.
    h3_index: Mapped[str | None] = mapped_column(Text, nullable=True)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislike_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="posts")
    reactions: Mapped[list[PostReaction]] = relationship(
        "PostReaction",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
