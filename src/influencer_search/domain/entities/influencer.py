"""
Influencer Entities - Canonical Creator Domain Model

This module defines the platform-agnostic representation of a creator
profile returned by any of the supported search backends.

Key Entities:
    - Platform: Supported social networks
    - CanonicalInfluencer: Normalized creator record
    - SearchPage: One page of gateway results as seen by the client
    - SearchResponse: Aggregated gateway result

Architecture:
    Uses frozen dataclasses; records are never mutated after
    normalization. Wire (camelCase) conversion lives on the entity so the
    gateway and the client controller agree on one shape.

Example:
    >>> inf = CanonicalInfluencer(platform=Platform.YOUTUBE, username="mkbhd")
    >>> inf.identity_key
    'youtube:mkbhd'
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from influencer_search.core.exceptions import UnsupportedPlatformError


class Platform(str, Enum):
    """Supported social networks with a search backend."""

    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"

    @classmethod
    def parse(cls, value: Any) -> Platform:
        """Parse a platform identifier, case-insensitive."""
        if isinstance(value, Platform):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedPlatformError(value)

    @classmethod
    def values(cls) -> list[str]:
        return [p.value for p in cls]


def _finite_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value if math.isfinite(value) else 0


@dataclass(frozen=True)
class CanonicalInfluencer:
    """
    Normalized creator record.

    ``followers`` and ``engagement_rate`` are always finite numbers;
    every other metric is optional and stays ``None`` when unknown.
    """

    platform: Platform
    username: str = ""
    fullname: str = ""
    followers: float = 0
    engagement_rate: float = 0
    user_id: str | None = None
    engagements: float | None = None
    average_views: float | None = None
    picture: str | None = None
    url: str | None = None
    is_verified: bool = False
    is_private: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "followers", _finite_or_zero(self.followers))
        object.__setattr__(self, "engagement_rate", _finite_or_zero(self.engagement_rate))

    @property
    def identity_key(self) -> str | None:
        """``platform:lower(user_id or username or url)``, or None if unkeyable."""
        base = self.user_id or self.username or self.url
        if not base:
            return None
        return f"{self.platform.value}:{str(base).lower()}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        return {
            "platform": self.platform.value,
            "userId": self.user_id,
            "username": self.username,
            "fullname": self.fullname,
            "followers": self.followers,
            "engagementRate": self.engagement_rate,
            "engagements": self.engagements,
            "averageViews": self.average_views,
            "picture": self.picture,
            "url": self.url,
            "isVerified": self.is_verified,
            "isPrivate": self.is_private,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CanonicalInfluencer:
        """Parse the wire shape produced by :meth:`to_dict`."""
        user_id = data.get("userId")
        return cls(
            platform=Platform.parse(data.get("platform")),
            user_id=str(user_id) if user_id not in (None, "") else None,
            username=data.get("username") or "",
            fullname=data.get("fullname") or "",
            followers=data.get("followers") or 0,
            engagement_rate=data.get("engagementRate") or 0,
            engagements=data.get("engagements"),
            average_views=data.get("averageViews"),
            picture=data.get("picture"),
            url=data.get("url"),
            is_verified=bool(data.get("isVerified")),
            is_private=bool(data.get("isPrivate")),
        )


@dataclass(frozen=True)
class SearchResponse:
    """
    Aggregated gateway result: unique records plus the upstream total.

    ``total`` is the sum of upstream totals and may exceed ``unique``.
    Page info is passed through for the client controller when known.
    """

    results: list[CanonicalInfluencer] = field(default_factory=list)
    total: int = 0
    page: int | None = None
    total_pages: int | None = None
    next_cursor: str | None = None

    @property
    def unique(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "unique": self.unique,
        }
        if self.page is not None:
            data["page"] = self.page
        if self.total_pages is not None:
            data["totalPages"] = self.total_pages
        if self.next_cursor is not None:
            data["nextCursor"] = self.next_cursor
        return data


@dataclass(frozen=True)
class SearchPage:
    """
    One request/response cycle as seen by the client controller.

    Supports both page/total_pages and cursor pagination conventions.
    """

    results: tuple[CanonicalInfluencer, ...] = ()
    total: int | None = None
    page: int | None = None
    total_pages: int | None = None
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        if self.page is not None and self.total_pages is not None:
            return self.page + 1 < self.total_pages
        return self.next_cursor is not None

    @classmethod
    def from_response(cls, data: dict[str, Any], *, requested_page: int | None = None) -> SearchPage:
        """Build a page from a gateway response body, skipping bad rows."""
        rows = data.get("results")
        results: list[CanonicalInfluencer] = []
        if isinstance(rows, list):
            for row in rows:
                if not isinstance(row, dict):
                    continue
                try:
                    results.append(CanonicalInfluencer.from_dict(row))
                except UnsupportedPlatformError:
                    continue

        page = _opt_int(data.get("page"))
        if page is None:
            page = requested_page
        cursor = data.get("nextCursor")
        return cls(
            results=tuple(results),
            total=_opt_int(data.get("total")),
            page=page,
            total_pages=_opt_int(data.get("totalPages")),
            next_cursor=str(cursor) if cursor not in (None, "") else None,
        )


def _opt_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if math.isfinite(number) else None
