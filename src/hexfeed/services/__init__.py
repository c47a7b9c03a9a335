# src/hexfeed/services/__init__.py
"""Business logic services for the Hexfeed reputation service."""

from .reputation import ReputationService
from .reputation_cache import ReputationCache, get_reputation_cache

__all__ = [
    "ReputationService",
    "ReputationCache",
    "get_reputation_cache",
]
