"""
Body Sanitizer - Per-Platform Request Shape Correction

YouTube's search backend has a stricter filter grammar than the other
platforms and rejects (or silently empties) bodies the others accept.
This module corrects bodies before they go upstream and provides the
``relax`` variant used for the gateway's one-shot fallback retry.

Architecture Decision:
    One ``BodySanitizer`` per platform behind a registry. The gateway only
    calls ``sanitize(platform, body, relax=...)`` and never branches on the
    platform itself. All sanitizers work on a deep copy; the caller's body
    is never mutated.

Example:
    >>> body = sanitize_youtube_body({"filter": {"influencer": {"lastposted": 10}}})
    >>> body["filter"]["influencer"]["lastposted"]
    30
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Any, Protocol

from influencer_search.domain.entities import Platform

logger = logging.getLogger(__name__)

DEFAULT_SORT: dict[str, str] = {"field": "followers", "direction": "desc"}

YOUTUBE_MIN_LAST_POSTED_DAYS = 30
YOUTUBE_AGE_BOUNDARIES: frozenset[int] = frozenset({18, 25, 35, 45, 65})

# Influencer keys removed in relax mode (growth, view/engagement floors, recency)
RELAX_DROPPED_INFLUENCER_KEYS: tuple[str, ...] = (
    "viewsGrowthRate",
    "followersGrowthRate",
    "likesGrowthRate",
    "growth",
    "views",
    "avgViews",
    "engagements",
    "engagementRate",
    "lastposted",
    "lastPostAgeDaysMax",
)


class BodySanitizer(Protocol):
    """Platform-specific request body correction."""

    def sanitize(self, body: dict[str, Any], *, relax: bool = False) -> dict[str, Any]: ...


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _prepare(body: Any) -> dict[str, Any]:
    """Deep-copy the input and inject the default page index."""
    out = copy.deepcopy(body) if isinstance(body, dict) else {}
    if not isinstance(out.get("page"), int) or isinstance(out.get("page"), bool):
        out["page"] = 0
    return out


def _to_days(value: Any) -> int | None:
    """Whole days, rounding fractions up; non-numeric values give None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return math.ceil(number) if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number != int(number):
        return None
    return int(number)


class DefaultBodySanitizer:
    """Sanitizer for platforms with a lenient grammar: only injects ``page``."""

    def sanitize(self, body: dict[str, Any], *, relax: bool = False) -> dict[str, Any]:
        return _prepare(body)


class YouTubeBodySanitizer:
    """
    Sanitizer for YouTube's stricter filter grammar.

    Strict rules:
    - sort clause required (default followers desc)
    - ``lastposted`` clamped to at least 30 days
    - ``age`` bounds must be in the allowed boundary set, else dropped
    - audience ``age`` and ``ageRange`` are mutually exclusive (``age`` wins)
    - ``filterOperations`` removed (conflicts with sort ordering)

    Relax mode also drops audience filters, growth-rate filters,
    view/engagement floors and the recency filter, and forces the default
    sort.
    """

    def sanitize(self, body: dict[str, Any], *, relax: bool = False) -> dict[str, Any]:
        out = _prepare(body)

        sort = out.get("sort")
        if relax or not isinstance(sort, dict) or not sort.get("field"):
            out["sort"] = dict(DEFAULT_SORT)

        out.pop("filterOperations", None)

        filt = out.get("filter")
        if not isinstance(filt, dict):
            return out
        filt.pop("filterOperations", None)

        influencer = filt.get("influencer")
        if isinstance(influencer, dict):
            influencer.pop("filterOperations", None)
            self._clamp_last_posted(influencer)
            self._coerce_age(influencer)

        audience = filt.get("audience")
        if isinstance(audience, dict) and "age" in audience and "ageRange" in audience:
            logger.debug("YouTube audience: dropping ageRange in favour of age")
            audience.pop("ageRange")

        if relax:
            filt.pop("audience", None)
            if isinstance(influencer, dict):
                for key in RELAX_DROPPED_INFLUENCER_KEYS:
                    influencer.pop(key, None)

        return out

    @staticmethod
    def _clamp_last_posted(influencer: dict[str, Any]) -> None:
        if "lastposted" not in influencer:
            return
        days = _to_days(influencer["lastposted"])
        if days is None:
            influencer.pop("lastposted")
        elif days < YOUTUBE_MIN_LAST_POSTED_DAYS:
            influencer["lastposted"] = YOUTUBE_MIN_LAST_POSTED_DAYS
        else:
            influencer["lastposted"] = days

    @staticmethod
    def _coerce_age(influencer: dict[str, Any]) -> None:
        if "age" not in influencer:
            return
        age = _as_dict(influencer["age"])
        coerced: dict[str, int] = {}
        for bound in ("min", "max"):
            if age.get(bound) is None:
                continue
            value = _to_int(age[bound])
            if value not in YOUTUBE_AGE_BOUNDARIES:
                # Fail open: an invalid bound drops the whole age filter
                logger.debug(f"YouTube age filter dropped: {bound}={age[bound]!r} not allowed")
                influencer.pop("age")
                return
            coerced[bound] = value
        if coerced:
            influencer["age"] = coerced
        else:
            influencer.pop("age")


_DEFAULT_SANITIZER = DefaultBodySanitizer()

_sanitizers: dict[Platform, BodySanitizer] = {
    Platform.YOUTUBE: YouTubeBodySanitizer(),
}


def register_sanitizer(platform: Platform | str, sanitizer: BodySanitizer) -> None:
    """Register (or replace) the sanitizer used for a platform."""
    _sanitizers[Platform.parse(platform)] = sanitizer


def get_sanitizer(platform: Platform | str) -> BodySanitizer:
    return _sanitizers.get(Platform.parse(platform), _DEFAULT_SANITIZER)


def sanitize(platform: Platform | str, body: dict[str, Any], *, relax: bool = False) -> dict[str, Any]:
    """Return a corrected deep copy of ``body`` for ``platform``."""
    return get_sanitizer(platform).sanitize(body, relax=relax)


def sanitize_youtube_body(body: dict[str, Any], *, relax: bool = False) -> dict[str, Any]:
    """Shortcut for ``sanitize(Platform.YOUTUBE, body, relax=relax)``."""
    return sanitize(Platform.YOUTUBE, body, relax=relax)
