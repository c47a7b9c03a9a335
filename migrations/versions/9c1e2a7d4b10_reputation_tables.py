"""reputation tables

Revision ID: 9c1e2a7d4b10
Revises:
Create Date: 2026-10-17 09:12:41.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "9c1e2a7d4b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

reaction_type = sa.Enum("like", "dislike", name="reaction_type")


def upgrade() -> None:
    """Create users, posts and reactions."""
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("reliability_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("total_likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_dislikes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "reliability_score >= 0 AND reliability_score <= 100",
            name="ck_user_reliability_range",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("h3_index", sa.Text(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislike_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("view_count >= 0", name="ck_post_view_count"),
        sa.CheckConstraint("like_count >= 0", name="ck_post_like_count"),
        sa.CheckConstraint("dislike_count >= 0", name="ck_post_dislike_count"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_user_id", "post", ["user_id"])
    op.create_table(
        "post_reaction",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("type", reaction_type, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_post_reaction_user_post"),
    )
    op.create_index(
        "ix_post_reaction_user_created", "post_reaction", ["user_id", "created_at"]
    )
    op.create_index(
        "ix_post_reaction_post_created", "post_reaction", ["post_id", "created_at"]
    )


def downgrade() -> None:
    """Drop reputation tables."""
    op.drop_index("ix_post_reaction_post_created", table_name="post_reaction")
    op.drop_index("ix_post_reaction_user_created", table_name="post_reaction")
    op.drop_table("post_reaction")
    op.drop_index("ix_post_user_id", table_name="post")
    op.drop_table("post")
    op.drop_table("user")
    reaction_type.drop(op.get_bind(), checkfirst=True)
