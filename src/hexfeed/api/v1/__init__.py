"""Version 1 API endpoints."""

from .endpoints import reputation_router

__all__ = [
    "reputation_router",
]
