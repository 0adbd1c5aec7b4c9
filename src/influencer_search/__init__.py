"""
Influencer Search - Multi-platform influencer discovery aggregation.

Fans one search out to several social-platform search backends, normalizes
their divergent record shapes and deduplicates creators across pages and
envelopes.

Architecture:
    - core: exceptions
    - domain: canonical entities and the filter tree
    - application: search gateway, handle lookup, report proxy, client controller
    - infrastructure: upstream HTTP client
    - api: FastAPI routes
"""

from __future__ import annotations

from .application.search import (
    SearchGateway,
    dedupe,
    normalize,
    sanitize,
    sanitize_youtube_body,
)
from .application.session import GatewayTransport, SearchController, SearchState
from .domain.entities import CanonicalInfluencer, FilterState, Platform, SearchPage, SearchResponse

__version__ = "0.1.0"

__all__ = [
    "CanonicalInfluencer",
    "FilterState",
    "GatewayTransport",
    "Platform",
    "SearchController",
    "SearchGateway",
    "SearchPage",
    "SearchResponse",
    "SearchState",
    "__version__",
    "dedupe",
    "normalize",
    "sanitize",
    "sanitize_youtube_body",
]
