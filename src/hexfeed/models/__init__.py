# src/hexfeed/models/__init__.py
"""SQLAlchemy models for the Hexfeed reputation service."""

from .post import Post
from .reaction import PostReaction, ReactionType
from .user import User

__all__ = [
    "Post",
    "PostReaction", "ReactionType",
    "User",
]
