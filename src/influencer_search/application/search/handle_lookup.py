"""
Handle Lookup - Find accounts by handle or display name.

Resolves a comma-separated list of handles (``techwiser,@audreyvictoria``)
against the users endpoint of each selected platform and ranks the matches.

Scoring (per query, higher is better):
    exact handle          100
    URL contains /@query   95
    exact full name        90
    handle prefix          70
    full name prefix       60
    handle contains        45
    full name contains     35
    anything else          10

Candidates are merged by ``platform:username`` keeping the best score, then
sorted by score, verified first, followers, username.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from influencer_search.core.exceptions import InvalidPayloadError
from influencer_search.domain.entities import Platform
from influencer_search.infrastructure.http import UpstreamResponse

from .normalizer import to_number

logger = logging.getLogger(__name__)

EXACT_MATCH = "exact"
EXACT_FIRST = "exact-first"

PROFILE_URL_TEMPLATES: dict[Platform, str] = {
    Platform.INSTAGRAM: "https://instagram.com/{username}",
    Platform.TIKTOK: "https://www.tiktok.com/@{username}",
    Platform.YOUTUBE: "https://www.youtube.com/@{username}",
}


class UsersClient(Protocol):
    async def list_users(self, platform: Platform | str, query: str, limit: int = 10) -> UpstreamResponse: ...


@dataclass(frozen=True)
class MatchedUser:
    """One lookup candidate with its match score."""

    platform: Platform
    username: str
    user_id: str | None = None
    handle: str | None = None
    fullname: str | None = None
    followers: float | None = None
    is_verified: bool = False
    picture: str | None = None
    url: str | None = None
    score: int = 0

    @property
    def key(self) -> str:
        return f"{self.platform.value}:{self.username.lower()}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "userId": self.user_id,
            "username": self.username,
            "handle": self.handle,
            "fullname": self.fullname,
            "followers": self.followers,
            "isVerified": self.is_verified,
            "picture": self.picture,
            "url": self.url,
        }


def parse_queries(raw: str | Iterable[str] | None) -> list[str]:
    """Split on commas, strip a leading ``@``, lowercase, drop empties."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else [p for item in raw for p in str(item).split(",")]
    queries = []
    for part in parts:
        query = part.strip().removeprefix("@").strip().lower()
        if query:
            queries.append(query)
    return queries


def profile_url(platform: Platform, username: str) -> str:
    return PROFILE_URL_TEMPLATES[platform].format(username=username)


def score_match(user: MatchedUser, query: str) -> int:
    """Score how well ``user`` matches a lowercased query."""
    username = user.username.lower()
    fullname = (user.fullname or "").lower()
    url = (user.url or "").lower()

    if username == query:
        return 100
    if f"/@{query}" in url:
        return 95
    if fullname == query:
        return 90
    if username.startswith(query):
        return 70
    if fullname.startswith(query):
        return 60
    if query in username:
        return 45
    if query in fullname:
        return 35
    return 10


def is_exact_match(user: MatchedUser, queries: Iterable[str]) -> bool:
    """True when the handle, or the ``/@handle`` URL segment, equals a query."""
    username = user.username.lower()
    url = (user.url or "").lower()
    return any(username == q or f"/@{q}" in url for q in queries)


def _sort_key(user: MatchedUser) -> tuple[Any, ...]:
    return (-user.score, not user.is_verified, -(user.followers or 0), user.username)


def _to_user(raw: dict[str, Any], platform: Platform) -> MatchedUser:
    username = str(raw.get("username") or raw.get("handle") or "")
    user_id = raw.get("userId")
    return MatchedUser(
        platform=platform,
        username=username,
        user_id=str(user_id) if user_id not in (None, "") else None,
        handle=raw.get("handle"),
        fullname=raw.get("fullname"),
        followers=to_number(raw.get("followers")),
        is_verified=bool(raw.get("isVerified")),
        picture=raw.get("picture"),
        url=profile_url(platform, username),
    )


class HandleLookup:
    """Ranks accounts from the per-platform users endpoint."""

    def __init__(self, client: UsersClient) -> None:
        self._client = client

    async def lookup(
        self,
        queries: str | Iterable[str] | None,
        platforms: Iterable[Platform | str],
        *,
        strict: bool = False,
        match: str = EXACT_FIRST,
    ) -> list[MatchedUser]:
        """
        Look up every query on every platform.

        Args:
            queries: Handles or names, comma-separated or as a list
            platforms: Platforms to search
            strict: Keep only exact handle matches
            match: ``exact`` behaves like ``strict``; anything else ranks fuzzily

        Raises:
            InvalidPayloadError: When no query or no platform is given
            UnsupportedPlatformError: For an unknown platform identifier
        """
        parsed = parse_queries(queries)
        selected = [Platform.parse(p) for p in platforms]
        if not parsed or not selected:
            raise InvalidPayloadError("Provide ?q=<handle>[,handle...]&platforms=instagram,tiktok,youtube")

        best: dict[str, MatchedUser] = {}
        for platform in selected:
            for query in parsed:
                for user in await self._fetch(platform, query):
                    scored = replace(user, score=score_match(user, query))
                    previous = best.get(scored.key)
                    if previous is None or scored.score > previous.score:
                        best[scored.key] = scored

        results = list(best.values())
        if strict or (match or "").lower() == EXACT_MATCH:
            results = [u for u in results if is_exact_match(u, parsed)]
        results.sort(key=_sort_key)

        logger.info(f"Handle lookup {parsed} on {[p.value for p in selected]}: {len(results)} match(es)")
        return results

    async def _fetch(self, platform: Platform, query: str) -> list[MatchedUser]:
        response = await self._client.list_users(platform, query)
        if not response.ok:
            logger.warning(f"{platform.value}: users lookup for {query!r} failed ({response.status_code})")
        users = response.data.get("users")
        if not isinstance(users, list):
            return []
        return [_to_user(raw, platform) for raw in users if isinstance(raw, dict)]
