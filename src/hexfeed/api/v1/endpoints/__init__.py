"""API endpoint modules for version 1."""

from .reputation import router as reputation_router

__all__ = [
    "reputation_router",
]
