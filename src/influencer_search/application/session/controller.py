"""
Search Controller - Client-side incremental search state.

Drives the search route the way a results page does: one initial search,
then "load more" pages merged into the running list, or "load all" until
the backend runs out of pages.

Concurrency model:
    - every request runs as its own ``asyncio.Task``
    - starting a request cancels the previous in-flight task (single-flight)
    - every request gets a monotonic id; a response whose id is no longer
      current is dropped
    - state is an immutable ``SearchState`` snapshot replaced on each
      transition, so readers never observe a half-applied update

Example:
    >>> async with httpx.AsyncClient(base_url="http://localhost:8000") as http:
    ...     controller = SearchController(GatewayTransport(http), ["youtube"])
    ...     await controller.run_search("tech")
    ...     await controller.load_all()
    ...     len(controller.state.results)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any

import httpx

from influencer_search.application.search.body_builder import (
    DEFAULT_LIMIT,
    build_search_body,
    strip_platform_fields,
)
from influencer_search.application.search.deduplicator import merge_first_seen
from influencer_search.core.exceptions import APIError, ErrorContext, NetworkError
from influencer_search.domain.entities import CanonicalInfluencer, FilterState, Platform, SearchPage

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 200
SEARCH_ROUTE = "/api/search"

Transport = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class SearchState:
    """Snapshot of the controller's search state."""

    results: tuple[CanonicalInfluencer, ...] = ()
    loading: bool = False
    error: str | None = None
    page: int = 0
    total_pages: int | None = None
    cursor: str | None = None
    total: int | None = None
    has_searched: bool = False

    @property
    def has_more(self) -> bool:
        if self.total_pages is not None:
            return self.page + 1 < self.total_pages
        return self.cursor is not None

    @property
    def no_results(self) -> bool:
        return self.has_searched and not self.loading and self.error is None and not self.results


class GatewayTransport:
    """
    POSTs ``{platforms, body}`` payloads to the search route.

    Raises:
        APIError: Non-2xx answer, with the route's ``error`` message
        NetworkError: The request could not be completed
    """

    def __init__(self, client: httpx.AsyncClient, path: str = SEARCH_ROUTE) -> None:
        self._client = client
        self._path = path

    async def __call__(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(self._path, json=payload)
        except httpx.RequestError as e:
            raise NetworkError(f"Search request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            message = data.get("error") or "Search failed"
            raise APIError(
                str(message),
                status_code=response.status_code,
                context=ErrorContext(operation="search", metadata={"status": response.status_code}),
            )
        return data


class SearchController:
    """
    Incremental search over the aggregated search route.

    Args:
        transport: Async callable taking the route payload, returning its JSON
        platforms: Selected platforms
        filters: Initial filter tree (defaults to ``FilterState.default()``)
        sort: UI sort option (followers, engagement, recent, relevance)
        page_size: Results per upstream page
    """

    def __init__(
        self,
        transport: Transport,
        platforms: Iterable[Platform | str],
        *,
        filters: FilterState | None = None,
        sort: str = "followers",
        page_size: int = DEFAULT_LIMIT,
    ) -> None:
        self._transport = transport
        self._platforms = [Platform.parse(p) for p in platforms]
        self._filters = filters or FilterState.default()
        self._sort = sort
        self._page_size = page_size
        self._query: str | None = None
        self._state = SearchState()
        self._request_id = 0
        self._generation = 0
        self._task: asyncio.Task[dict[str, Any]] | None = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def platforms(self) -> list[Platform]:
        return list(self._platforms)

    @property
    def request_id(self) -> int:
        return self._request_id

    # =========================================================================
    # Filter operations
    # =========================================================================

    def update_filter(self, path: str, value: Any) -> FilterState:
        """Set one filter by dotted path; the previous tree is left intact."""
        self._filters = self._filters.with_value(path, value)
        return self._filters

    def reset_filters(self) -> None:
        """Restore default filters and clear results."""
        self.cancel()
        self._filters = FilterState.default()
        self._state = SearchState()

    def set_platforms(self, platforms: Iterable[Platform | str]) -> None:
        """Change the platform selection; results are cleared when it changes."""
        selected = [Platform.parse(p) for p in platforms]
        if set(selected) == set(self._platforms):
            self._platforms = selected
            return
        self.cancel()
        self._platforms = selected
        self._state = SearchState()

    def build_payload(self, *, page: int = 0, cursor: str | None = None) -> dict[str, Any]:
        """Route payload for the current filters, platforms and query."""
        filters = strip_platform_fields(self._filters, self._platforms)
        body = build_search_body(
            self._platforms,
            filters,
            page=page,
            sort=self._sort,
            limit=self._page_size,
            query=self._query,
            cursor=cursor,
        )
        return {"platforms": [p.value for p in self._platforms], "body": body}

    # =========================================================================
    # Requests
    # =========================================================================

    async def run_search(self, query: str | None = None, *, reset: bool = True) -> None:
        """
        Start a new search from page 0.

        Args:
            query: Free-text keywords, remembered for later pages
            reset: Clear the visible results while the request is in flight
        """
        self._generation += 1
        self._query = query.strip() if query and query.strip() else None
        payload = self.build_payload(page=0)

        loading = replace(self._state, loading=True, error=None)
        if reset:
            loading = replace(loading, results=(), page=0, total_pages=None, cursor=None, total=None)
        self._state = loading

        data = await self._dispatch(payload)
        if data is None:
            return
        if isinstance(data, Exception):
            self._state = replace(self._state, loading=False, error=str(data), has_searched=True)
            return

        page = SearchPage.from_response(data, requested_page=0)
        self._state = SearchState(
            results=tuple(merge_first_seen((), page.results)),
            loading=False,
            page=page.page or 0,
            total_pages=page.total_pages,
            cursor=page.next_cursor,
            total=page.total,
            has_searched=True,
        )
        logger.info(f"Search returned {len(self._state.results)} result(s), has_more={self._state.has_more}")

    async def load_more(self) -> None:
        """Fetch the next page and merge it; no-op without more pages or while loading."""
        state = self._state
        if not state.has_more or state.loading:
            return

        next_page = state.page + 1
        cursor = state.cursor if state.total_pages is None else None
        payload = self.build_payload(page=next_page, cursor=cursor)
        self._state = replace(state, loading=True, error=None)

        data = await self._dispatch(payload)
        if data is None:
            return
        if isinstance(data, Exception):
            self._state = replace(self._state, loading=False, error=str(data))
            return

        page = SearchPage.from_response(data, requested_page=next_page)
        current = self._state
        self._state = replace(
            current,
            results=tuple(merge_first_seen(current.results, page.results)),
            loading=False,
            page=page.page if page.page is not None else next_page,
            total_pages=page.total_pages,
            cursor=page.next_cursor,
            total=page.total if page.total is not None else current.total,
        )
        logger.debug(f"Loaded page {self._state.page}: {len(self._state.results)} result(s) so far")

    async def load_all(self, max_pages: int = DEFAULT_MAX_PAGES) -> int:
        """
        Keep loading pages until none are left.

        Stops at ``max_pages`` iterations, on the first error, or when the
        controller is cancelled or a new search starts.

        Returns:
            Number of pages requested
        """
        generation = self._generation
        pages = 0
        while pages < max_pages:
            state = self._state
            if not state.has_more or state.loading or state.error is not None:
                break
            if generation != self._generation:
                break
            await self.load_more()
            pages += 1
            await asyncio.sleep(0)
        if pages >= max_pages and self._state.has_more:
            logger.warning(f"load_all stopped at the {max_pages} page cap")
        return pages

    def cancel(self) -> None:
        """Cancel the in-flight request; its response will be ignored."""
        self._generation += 1
        self._request_id += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        if self._state.loading:
            self._state = replace(self._state, loading=False)

    async def _dispatch(self, payload: dict[str, Any]) -> dict[str, Any] | Exception | None:
        """
        Run one request as a task.

        Returns the response body, the failure, or None when the request was
        superseded or cancelled.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._request_id += 1
        request_id = self._request_id
        task = asyncio.ensure_future(self._transport(payload))
        self._task = task

        try:
            data = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(f"Request {request_id} cancelled")
            return None
        except Exception as e:
            if request_id != self._request_id:
                return None
            logger.warning(f"Request {request_id} failed: {e}")
            return e
        finally:
            if self._task is task:
                self._task = None

        if request_id != self._request_id:
            logger.debug(f"Dropping stale response for request {request_id}")
            return None
        return data if isinstance(data, dict) else {}
