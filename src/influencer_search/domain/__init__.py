"""
Domain Layer - Core Business Logic

Contains:
- entities: Core domain entities (CanonicalInfluencer, FilterState)
"""

from .entities import (
    CanonicalInfluencer,
    FilterState,
    Platform,
    SearchPage,
    SearchResponse,
)

__all__ = [
    "CanonicalInfluencer",
    "FilterState",
    "Platform",
    "SearchPage",
    "SearchResponse",
]
