"""
Multi-Platform Search

This module fans a single search body out to several platform backends and
merges the answers into one deduplicated list.

Key Components:
- body_builder: FilterState → upstream request body
- body_sanitizer: per-platform shape correction (YouTube strict grammar)
- SearchGateway: sequential fan-out with a one-shot relaxed retry
- normalizer: raw platform record → CanonicalInfluencer
- Deduplicator: identity merging with a strict tie-break
- HandleLookup: handle/name lookup with match scoring

Architecture:
    {platforms, body}
        │
        ▼
    ┌──────────────────┐
    │  BodySanitizer   │  ← per platform, relax variant for retry
    └────────┬─────────┘
             │
    ┌────────┴────────┐
    ▼        ▼        ▼
  Instagram TikTok  YouTube  ← Sequential calls
    │        │        │
    └────────┴────────┘
             │
             ▼
    ┌──────────────────┐
    │    Normalizer    │  ← Extractor table per field
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐
    │   Deduplicator   │  ← Identity key + tie-break
    └────────┬─────────┘
             │
             ▼
    {results, total, unique}
"""

from __future__ import annotations

from .body_builder import (
    DEFAULT_LIMIT,
    SORT_OPTIONS,
    build_search_body,
    map_sort,
    prune_empty,
    strip_platform_fields,
)
from .body_sanitizer import (
    BodySanitizer,
    DefaultBodySanitizer,
    YouTubeBodySanitizer,
    get_sanitizer,
    register_sanitizer,
    sanitize,
    sanitize_youtube_body,
)
from .deduplicator import (
    DedupStats,
    Deduplicator,
    dedupe,
    merge_first_seen,
)
from .gateway import RESULT_ENVELOPE_KEYS, SearchGateway
from .handle_lookup import HandleLookup, MatchedUser, parse_queries, score_match
from .normalizer import FIELD_EXTRACTORS, normalize, normalize_many, to_number

__all__ = [
    # Body builder
    "DEFAULT_LIMIT",
    "SORT_OPTIONS",
    "build_search_body",
    "map_sort",
    "prune_empty",
    "strip_platform_fields",
    # Sanitizer
    "BodySanitizer",
    "DefaultBodySanitizer",
    "YouTubeBodySanitizer",
    "get_sanitizer",
    "register_sanitizer",
    "sanitize",
    "sanitize_youtube_body",
    # Deduplication
    "DedupStats",
    "Deduplicator",
    "dedupe",
    "merge_first_seen",
    # Gateway
    "RESULT_ENVELOPE_KEYS",
    "SearchGateway",
    # Handle lookup
    "HandleLookup",
    "MatchedUser",
    "parse_queries",
    "score_match",
    # Normalization
    "FIELD_EXTRACTORS",
    "normalize",
    "normalize_many",
    "to_number",
]
