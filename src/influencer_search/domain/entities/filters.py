"""
Filter State - Immutable Search Filter Tree

The filter tree is grouped by scope:
    - influencer: filters common to every platform
    - audience: weighted audience filters
    - youtube / tiktok / instagram: platform-exclusive extras

Updates never mutate an existing tree. ``FilterState.with_value`` copies
each level from the root down to the changed leaf and shares the rest.

Example:
    >>> state = FilterState.default()
    >>> nxt = state.with_value("influencer.followers_min", 5000)
    >>> state.influencer["followers_min"], nxt.influencer["followers_min"]
    (1000, 5000)
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

from influencer_search.core.exceptions import InvalidPayloadError

# Platform-exclusive filter keys; only sent upstream when that platform is selected
PLATFORM_FILTER_KEYS: dict[str, tuple[str, ...]] = {
    "youtube": ("is_official_artist", "views_growth_rate"),
    "tiktok": ("likes_growth_rate", "shares_min", "shares_max", "saves_min", "saves_max"),
    "instagram": (
        "reels_plays_min",
        "reels_plays_max",
        "has_sponsored_posts",
        "account_types",
        "brands",
        "interests",
    ),
}

DEFAULT_INFLUENCER_FILTERS: dict[str, Any] = {
    "followers_min": 1000,
    "followers_max": 10_000_000,
    "engagement_rate": None,  # UI percent 0..100
    "verified_only": None,
    "language": None,
    "gender": None,
    "age_min": None,
    "age_max": None,
    "last_posted_days": None,
    "keywords": None,
    "bio_query": None,
    "views_min": None,
    "views_max": None,
    "has_email": None,
    "followers_growth_rate": None,
    "location_geo_ids": None,
    "relevance_tags": None,
}

DEFAULT_AUDIENCE_FILTERS: dict[str, Any] = {
    "language": None,
    "gender": None,
    "ages": None,
    "age_range": None,
    "locations": None,
    "relevance_tags": None,
    "credibility": None,
}


@dataclass(frozen=True)
class FilterState:
    """Immutable filter tree driving the client search controller."""

    influencer: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_INFLUENCER_FILTERS))
    audience: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_AUDIENCE_FILTERS))
    youtube: dict[str, Any] = field(default_factory=dict)
    tiktok: dict[str, Any] = field(default_factory=dict)
    instagram: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls) -> FilterState:
        return cls()

    @classmethod
    def scopes(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def get(self, path: str, default: Any = None) -> Any:
        """Read a dotted path, e.g. ``influencer.followers_min``."""
        scope, *rest = path.split(".")
        if scope not in self.scopes():
            return default
        node: Any = getattr(self, scope)
        for key in rest:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def with_value(self, path: str, value: Any) -> FilterState:
        """
        Return a new state with ``value`` stored at ``path``.

        Every dict on the way from the scope to the leaf is copied;
        siblings are shared with the previous state.
        """
        scope, *keys = path.split(".")
        if scope not in self.scopes() or not keys:
            raise InvalidPayloadError(f"Invalid filter path: {path!r}")
        return replace(self, **{scope: _assoc_in(getattr(self, scope), keys, value)})


def _assoc_in(node: dict[str, Any], keys: list[str], value: Any) -> dict[str, Any]:
    head, *tail = keys
    copy = dict(node)
    if tail:
        child = copy.get(head)
        copy[head] = _assoc_in(child if isinstance(child, dict) else {}, tail, value)
    else:
        copy[head] = value
    return copy
