"""
Search Gateway - Multi-Platform Fan-Out

Sends one search body to every selected platform and merges the answers
into a single deduplicated result list.

Flow per request:
    platforms (in the order given, one at a time)
        │
        ▼
    sanitize(platform, body)        ← per-platform shape correction
        │
        ▼
    client.search(platform, body)   ← non-2xx aborts the whole request
        │
        ▼ (youtube, total == 0, relax_fallback)
    one retry with sanitize(..., relax=True)
        │
        ▼
    collect envelope lists → normalize → dedupe

Failure semantics:
    The first upstream failure raises ``UpstreamError``. Results already
    gathered from earlier platforms are discarded and later platforms are
    never called. A failed relaxed retry is not fatal: the original empty
    answer is kept.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from influencer_search.core.exceptions import (
    ErrorContext,
    InfluencerSearchError,
    InvalidPayloadError,
    UpstreamError,
)
from influencer_search.domain.entities import CanonicalInfluencer, Platform, SearchResponse
from influencer_search.infrastructure.http import UpstreamResponse

from .body_sanitizer import sanitize
from .deduplicator import Deduplicator
from .normalizer import normalize, to_number

logger = logging.getLogger(__name__)

# Envelope fields that may carry result items, in collection order
RESULT_ENVELOPE_KEYS: tuple[str, ...] = (
    "results",
    "items",
    "influencers",
    "directs",
    "lookalikes",
    "users",
    "channels",
)


class SearchClient(Protocol):
    """Anything that can POST a search body for one platform."""

    async def search(self, platform: Platform | str, body: dict[str, Any]) -> UpstreamResponse: ...


@dataclass
class PlatformResult:
    """Outcome of one platform call."""

    platform: Platform
    total: int = 0
    items: list[Any] = field(default_factory=list)
    relaxed: bool = False
    next_cursor: str | None = None


def collect_items(data: dict[str, Any]) -> list[Any]:
    """Concatenate every list-valued envelope field."""
    items: list[Any] = []
    for key in RESULT_ENVELOPE_KEYS:
        value = data.get(key)
        if isinstance(value, list):
            items.extend(value)
    return items


def reported_total(data: dict[str, Any]) -> int:
    """Upstream ``total`` as an int; non-numeric counts as 0."""
    number = to_number(data.get("total"))
    return int(number) if number is not None else 0


class SearchGateway:
    """
    Fans a search body out to the selected platforms.

    Args:
        client: Upstream client with an async ``search(platform, body)``
        relax_fallback: Allow the one-shot relaxed retry for YouTube
    """

    def __init__(self, client: SearchClient, *, relax_fallback: bool = False) -> None:
        self._client = client
        self._relax_fallback = relax_fallback

    @property
    def relax_fallback(self) -> bool:
        return self._relax_fallback

    @staticmethod
    def parse_platforms(platforms: Iterable[Any]) -> list[Platform]:
        """Validate platform identifiers; raises UnsupportedPlatformError."""
        return [Platform.parse(p) for p in platforms]

    async def search(self, platforms: Iterable[Platform | str], body: dict[str, Any]) -> SearchResponse:
        """
        Run the search on every platform and merge the results.

        Raises:
            InvalidPayloadError: When no platform is given
            UnsupportedPlatformError: For an unknown platform identifier
            UpstreamError: On the first non-2xx upstream answer
        """
        selected = self.parse_platforms(platforms)
        if not selected:
            raise InvalidPayloadError("Provide { platforms, body }")

        outcomes: list[PlatformResult] = []
        for platform in selected:
            outcomes.append(await self._search_platform(platform, body))

        collected: list[CanonicalInfluencer] = []
        for outcome in outcomes:
            collected.extend(normalize(item, outcome.platform) for item in outcome.items)

        deduplicator = Deduplicator()
        results = deduplicator.dedupe(collected)
        total = sum(outcome.total for outcome in outcomes)

        logger.info(
            f"Search across {[p.value for p in selected]}: total={total} "
            f"collected={len(collected)} unique={len(results)} "
            f"merged={deduplicator.stats.duplicates_merged}"
        )

        return SearchResponse(
            results=results,
            total=total,
            page=_page_of(body),
            total_pages=_total_pages(outcomes, body),
            next_cursor=next((o.next_cursor for o in outcomes if o.next_cursor), None),
        )

    async def _search_platform(self, platform: Platform, body: dict[str, Any]) -> PlatformResult:
        response = await self._client.search(platform, sanitize(platform, body))
        if not response.ok:
            raise _upstream_error(platform, response)

        result = _to_result(platform, response.data)
        logger.info(f"{platform.value}: total={result.total} items={len(result.items)}")

        if platform is Platform.YOUTUBE and result.total == 0 and self._relax_fallback:
            retried = await self._retry_relaxed(platform, body)
            if retried is not None and retried.total > 0:
                return retried
        return result

    async def _retry_relaxed(self, platform: Platform, body: dict[str, Any]) -> PlatformResult | None:
        logger.warning(f"{platform.value}: empty result, retrying once with relaxed filters")
        try:
            response = await self._client.search(platform, sanitize(platform, body, relax=True))
        except InfluencerSearchError as e:
            logger.warning(f"{platform.value}: relaxed retry failed: {e}")
            return None
        if not response.ok:
            logger.warning(f"{platform.value}: relaxed retry failed ({response.status_code})")
            return None

        result = _to_result(platform, response.data)
        result.relaxed = True
        logger.info(f"{platform.value}: relaxed retry total={result.total}")
        return result


def _to_result(platform: Platform, data: dict[str, Any]) -> PlatformResult:
    cursor = data.get("nextCursor")
    return PlatformResult(
        platform=platform,
        total=reported_total(data),
        items=collect_items(data),
        next_cursor=str(cursor) if cursor not in (None, "") else None,
    )


def _upstream_error(platform: Platform, response: UpstreamResponse) -> UpstreamError:
    message = response.error_message(f"Search failed for {platform.value} ({response.status_code})")
    logger.warning(f"{platform.value}: upstream failure {response.status_code}: {message}")
    return UpstreamError(
        message,
        platform=platform.value,
        upstream_status=response.status_code,
        context=ErrorContext(
            operation="search",
            platform=platform.value,
            metadata={"status": response.status_code},
        ),
    )


def _page_of(body: dict[str, Any]) -> int | None:
    page = body.get("page") if isinstance(body, dict) else None
    if isinstance(page, bool) or not isinstance(page, int):
        return None
    return page


def _total_pages(outcomes: list[PlatformResult], body: dict[str, Any]) -> int | None:
    limit = body.get("limit") if isinstance(body, dict) else None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        return None
    largest = max((o.total for o in outcomes), default=0)
    return math.ceil(largest / limit)
