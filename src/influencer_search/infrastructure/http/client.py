"""
Modash API Client

Thin async client for the Modash-style discovery API. One instance serves
all platforms; the platform is a path segment.

API Documentation: https://docs.modash.io/

Endpoints used:
    POST /{platform}/search                      - filtered discovery search
    GET  /{platform}/users?limit=10&query=       - handle/name lookup
    GET  /{platform}/profile/{id}/report         - full profile report

Non-2xx answers are returned, not raised: the gateway needs the body's
``message``/``error`` to build its own failure.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from influencer_search.domain.entities import Platform

from .base_client import BaseAPIClient, UpstreamResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.modash.io/v1"
DEFAULT_TIMEOUT = 30.0
USERS_LOOKUP_LIMIT = 10


class ModashClient(BaseAPIClient):
    """
    Client for the platform search backends.

    Usage:
        async with ModashClient(api_key="...") as client:
            response = await client.search("youtube", {"page": 0})
            if response.ok:
                print(response.data.get("total"))
    """

    _service_name = "Modash"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Modash client.

        Args:
            api_key: Bearer token for the upstream API
            base_url: API root, e.g. ``https://api.modash.io/v1``
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        super().__init__(
            base_url=base_url or DEFAULT_BASE_URL,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def search(self, platform: Platform | str, body: dict[str, Any]) -> UpstreamResponse:
        """POST a search body to ``/{platform}/search``."""
        platform = Platform.parse(platform)
        logger.debug(f"Modash search: platform={platform.value} page={body.get('page')}")
        return await self._make_request(
            f"/{platform.value}/search",
            method="POST",
            data=body,
            headers={"Content-Type": "application/json"},
        )

    async def list_users(
        self,
        platform: Platform | str,
        query: str,
        limit: int = USERS_LOOKUP_LIMIT,
    ) -> UpstreamResponse:
        """Look up accounts by handle or name."""
        platform = Platform.parse(platform)
        return await self._make_request(
            f"/{platform.value}/users",
            params={"limit": limit, "query": query},
        )

    async def get_report(
        self,
        platform: Platform | str,
        user_id: str,
        calculation_method: str = "median",
    ) -> UpstreamResponse:
        """Fetch the full profile report for one account."""
        platform = Platform.parse(platform)
        return await self._make_request(
            f"/{platform.value}/profile/{quote(user_id, safe='')}/report",
            params={"calculationMethod": calculation_method},
        )
