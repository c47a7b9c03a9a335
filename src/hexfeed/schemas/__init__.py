# src/hexfeed/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .reputation import (
    PostStats,
    ReactionCreate,
    ReputationSummary,
    ReputationUpdate,
    TierInfoResponse,
    ViewResponse,
)

__all__ = [
    "PostStats",
    "ReactionCreate",
    "ReputationSummary", "ReputationUpdate",
    "TierInfoResponse",
    "ViewResponse",
]
