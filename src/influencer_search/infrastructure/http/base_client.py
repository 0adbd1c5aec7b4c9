"""
Base API Client - Common HTTP request pattern for upstream backends.

Provides a reusable base class with:
- httpx.AsyncClient lifecycle management
- Defensive JSON parsing (malformed bodies become ``{}``)
- Consistent network error handling and logging

Unlike a fetch-and-forget client, non-2xx responses are returned to the
caller as ``UpstreamResponse`` so the caller decides whether to abort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from typing_extensions import Self

from influencer_search.core.exceptions import NetworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    """Status plus defensively parsed JSON body of one upstream call."""

    status_code: int
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_message(self, fallback: str) -> str:
        """Message from the upstream body (``message`` or ``error``), else fallback."""
        for key in ("message", "error"):
            value = self.data.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return fallback


class BaseAPIClient:
    """
    Base class for external API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Consistent error handling

    Subclasses should set `_service_name`.

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self):
                super().__init__(base_url="https://api.example.com")

            async def get_item(self, item_id: str) -> UpstreamResponse:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds
            headers: Default headers for all requests
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers=headers or {},
            transport=transport,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        method: str = "GET",
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> UpstreamResponse:
        """
        Make one HTTP request and parse the body defensively.

        Raises:
            NetworkError: When the request could not be completed at all
        """
        full_url = self._build_url(url)
        try:
            response = await self._execute_request(
                full_url, method=method, data=data, params=params, headers=headers
            )
        except httpx.RequestError as e:
            logger.warning(f"{self._service_name} request failed: {e}")
            raise NetworkError(f"{self._service_name} request failed: {e}") from e

        parsed = self._parse_response(response)
        if response.status_code >= 400:
            logger.warning(f"{self._service_name} HTTP {response.status_code} for {method} {full_url}")
        return UpstreamResponse(status_code=response.status_code, data=parsed)

    async def _execute_request(
        self,
        url: str,
        *,
        method: str = "GET",
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute the actual HTTP request. Override for custom behavior."""
        if method == "POST":
            return await self._client.post(url, json=data or {}, params=params, headers=headers or {})
        return await self._client.get(url, params=params, headers=headers or {})

    @staticmethod
    def _parse_response(response: httpx.Response) -> dict[str, Any]:
        """Parse a JSON object body; anything else becomes ``{}``."""
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
