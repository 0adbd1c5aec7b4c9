"""
Normalizer - Raw platform record → CanonicalInfluencer

Raw search records differ per platform and per endpoint: the same value may
live under ``username``, ``handle``, ``channelHandle`` or ``slug``, either on
the record itself or on a nested ``profile`` object, sometimes under
``stats``. Instead of ad-hoc branching, every canonical field has an ordered
list of source paths in ``FIELD_EXTRACTORS``; the first present value wins.

``normalize`` never raises. Missing or malformed values degrade to ``None``
(or 0 for followers / engagement rate). Records without any identity are
still returned; the deduplicator decides what to drop.
"""

from __future__ import annotations

import math
from typing import Any

from influencer_search.domain.entities import CanonicalInfluencer, Platform

# Canonical field -> ordered source paths (dotted paths traverse nested dicts)
FIELD_EXTRACTORS: dict[str, tuple[str, ...]] = {
    "username": ("username", "handle", "channelHandle", "slug", "custom_url"),
    "user_id": ("userId", "id", "channelId", "profileId"),
    "fullname": ("fullName", "fullname", "display_name", "title", "name"),
    "followers": ("followers", "followerCount", "subscribers", "stats.followers"),
    "engagement_rate": ("engagementRate", "stats.engagementRate"),
    "engagements": ("engagements", "stats.avgEngagements", "stats.avgLikes"),
    "average_views": ("averageViews", "avgViews", "stats.avgViews"),
    "picture": ("picture", "avatar", "profilePicUrl", "thumbnail"),
    "url": ("url", "profileUrl", "link"),
    "is_verified": ("isVerified", "verified"),
    "is_private": ("isPrivate",),
}


def to_number(value: Any) -> float | None:
    """
    Strict numeric coercion.

    Returns None for anything that is not a finite number (including
    booleans, empty strings and NaN/inf). Numeric strings are accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _lookup(source: dict[str, Any], path: str) -> Any:
    node: Any = source
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def extract(source: dict[str, Any], field: str) -> Any:
    """Return the first non-None value for ``field`` from its source paths."""
    for path in FIELD_EXTRACTORS[field]:
        value = _lookup(source, path)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _user_id(record: dict[str, Any], source: dict[str, Any]) -> str | None:
    value = _lookup(record, "userId")
    if value is None:
        value = extract(source, "user_id")
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def normalize(raw: Any, platform: Platform | str) -> CanonicalInfluencer:
    """Map one raw platform record to a CanonicalInfluencer."""
    platform = Platform.parse(platform)
    record = raw if isinstance(raw, dict) else {}
    profile = record.get("profile")
    source = profile if isinstance(profile, dict) else record

    return CanonicalInfluencer(
        platform=platform,
        user_id=_user_id(record, source),
        username=_text(extract(source, "username")) or "",
        fullname=_text(extract(source, "fullname")) or "",
        followers=to_number(extract(source, "followers")) or 0,
        engagement_rate=to_number(extract(source, "engagement_rate")) or 0,
        engagements=to_number(extract(source, "engagements")),
        average_views=to_number(extract(source, "average_views")),
        picture=_text(extract(source, "picture")),
        url=_text(extract(source, "url")),
        is_verified=bool(extract(source, "is_verified")),
        is_private=bool(extract(source, "is_private")),
    )


def normalize_many(raws: list[Any], platform: Platform | str) -> list[CanonicalInfluencer]:
    return [normalize(raw, platform) for raw in raws]
