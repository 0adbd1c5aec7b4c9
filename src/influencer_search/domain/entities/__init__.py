"""
Domain Entities

Core business objects for influencer search.
"""

from __future__ import annotations

from .filters import PLATFORM_FILTER_KEYS, FilterState
from .influencer import (
    CanonicalInfluencer,
    Platform,
    SearchPage,
    SearchResponse,
)

__all__ = [
    # Influencer entities
    "CanonicalInfluencer",
    "Platform",
    "SearchPage",
    "SearchResponse",
    # Filter state
    "FilterState",
    "PLATFORM_FILTER_KEYS",
]
