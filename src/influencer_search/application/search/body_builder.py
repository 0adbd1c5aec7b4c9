"""
Request Body Builder - FilterState → upstream search body.

Turns the client's filter tree into the JSON body that the gateway fans out
to every selected platform. One body serves all selected platforms, so
platform-exclusive filters are attached only for platforms in the selected
set and dropped for the rest.

Example:
    >>> body = build_search_body(["youtube"], FilterState.default(), page=0)
    >>> body["sort"]
    {'field': 'followers', 'direction': 'desc'}
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from influencer_search.domain.entities import PLATFORM_FILTER_KEYS, FilterState, Platform

DEFAULT_LIMIT = 15
DEFAULT_CALCULATION_METHOD = "median"

# UI sort option -> upstream sort clause
SORT_OPTIONS: dict[str, dict[str, str]] = {
    "followers": {"field": "followers", "direction": "desc"},
    "engagement": {"field": "engagementRate", "direction": "desc"},
    "recent": {"field": "avgViews", "direction": "desc"},
    "relevance": {"field": "avgLikes", "direction": "desc"},
}


def map_sort(ui_sort: str | None) -> dict[str, str]:
    """Map a UI sort option to an upstream sort clause (unknown → followers)."""
    return dict(SORT_OPTIONS.get(ui_sort or "", SORT_OPTIONS["followers"]))


def prune_empty(value: Any) -> Any:
    """
    Recursively drop None, NaN, empty lists and empty dicts.

    Returns a new structure; the input is left untouched.
    """
    if isinstance(value, dict):
        pruned: dict[str, Any] = {}
        for key, item in value.items():
            item = prune_empty(item)
            if item is None:
                continue
            if isinstance(item, (list, dict)) and not item:
                continue
            pruned[key] = item
        return pruned
    if isinstance(value, list):
        return list(value)
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _range(lo: Any, hi: Any) -> dict[str, Any] | None:
    if lo is None and hi is None:
        return None
    return {"min": lo, "max": hi}


def _growth(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    return {
        "interval": value.get("interval"),
        "operator": value.get("operator"),
        "value": value.get("value"),
    }


def _percent_to_ratio(pct: Any) -> float | None:
    if pct is None or isinstance(pct, bool):
        return None
    try:
        pct = float(pct)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(pct):
        return None
    return max(0.0, min(100.0, pct)) / 100


def build_influencer_filter(filters: FilterState, platforms: Iterable[Platform | str]) -> dict[str, Any]:
    """Build ``filter.influencer`` including extras for selected platforms only."""
    f = filters.influencer
    selected = {Platform.parse(p).value for p in platforms}

    keywords = f.get("keywords")
    if isinstance(keywords, (list, tuple)):
        keywords = ",".join(str(k).strip() for k in keywords if str(k).strip()) or None

    influencer: dict[str, Any] = {
        "followers": _range(f.get("followers_min"), f.get("followers_max")),
        "engagementRate": _percent_to_ratio(f.get("engagement_rate")),
        "isVerified": f.get("verified_only") or None,
        "language": f.get("language"),
        "gender": f.get("gender"),
        "age": _range(f.get("age_min"), f.get("age_max")),
        "lastposted": f.get("last_posted_days"),
        "keywords": keywords,
        "bio": (f.get("bio_query") or "").strip() or None,
        "views": _range(f.get("views_min"), f.get("views_max")),
        "hasContactDetails": (
            [{"contactType": "email", "filterAction": "must"}] if f.get("has_email") else None
        ),
        "followersGrowthRate": _growth(f.get("followers_growth_rate")),
        "location": f.get("location_geo_ids"),
        "relevance": f.get("relevance_tags"),
    }

    if "youtube" in selected:
        yt = filters.youtube
        influencer["isOfficialArtist"] = yt.get("is_official_artist")
        influencer["viewsGrowthRate"] = _growth(yt.get("views_growth_rate"))

    if "tiktok" in selected:
        tt = filters.tiktok
        influencer["likesGrowthRate"] = _growth(tt.get("likes_growth_rate"))
        influencer["shares"] = _range(tt.get("shares_min"), tt.get("shares_max"))
        influencer["saves"] = _range(tt.get("saves_min"), tt.get("saves_max"))

    if "instagram" in selected:
        ig = filters.instagram
        influencer["reelsPlays"] = _range(ig.get("reels_plays_min"), ig.get("reels_plays_max"))
        influencer["hasSponsoredPosts"] = ig.get("has_sponsored_posts")
        influencer["accountTypes"] = ig.get("account_types")
        influencer["brands"] = ig.get("brands")
        influencer["interests"] = ig.get("interests")

    return prune_empty(influencer)


def build_audience_filter(filters: FilterState) -> dict[str, Any]:
    """Build ``filter.audience`` from weighted audience filters."""
    a = filters.audience
    audience = {
        "language": a.get("language"),
        "gender": a.get("gender"),
        "age": a.get("ages"),
        "ageRange": a.get("age_range"),
        "location": a.get("locations"),
        "relevance": a.get("relevance_tags"),
        "credibility": a.get("credibility"),
    }
    return prune_empty(audience)


def build_search_body(
    platforms: Iterable[Platform | str],
    filters: FilterState,
    *,
    page: int = 0,
    sort: str | None = "followers",
    limit: int | None = DEFAULT_LIMIT,
    query: str | None = None,
    cursor: str | None = None,
) -> dict[str, Any]:
    """
    Build the upstream request body for the selected platforms.

    A free-text ``query`` is folded into ``influencer.keywords`` when the
    filter tree carries no keywords of its own.
    """
    platforms = list(platforms)
    if query and query.strip() and not filters.influencer.get("keywords"):
        filters = filters.with_value("influencer.keywords", [query.strip()])

    filter_body: dict[str, Any] = {}
    influencer = build_influencer_filter(filters, platforms)
    audience = build_audience_filter(filters)
    if influencer:
        filter_body["influencer"] = influencer
    if audience:
        filter_body["audience"] = audience

    body: dict[str, Any] = {
        "page": page,
        "calculationMethod": DEFAULT_CALCULATION_METHOD,
        "sort": map_sort(sort),
        "filter": filter_body,
    }
    if limit is not None:
        body["limit"] = limit
    if cursor is not None:
        body["cursor"] = cursor
    return body


def strip_platform_fields(filters: FilterState, platforms: Iterable[Platform | str]) -> FilterState:
    """Clear platform-exclusive scopes for platforms that are not selected."""
    selected = {Platform.parse(p).value for p in platforms}
    cleared = {p: {} for p in PLATFORM_FILTER_KEYS if p not in selected and getattr(filters, p)}
    return replace(filters, **cleared) if cleared else filters
