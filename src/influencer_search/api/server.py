"""
HTTP API Server for multi-platform influencer search.

Exposes the search gateway, the handle lookup and the report proxy to the
browser client. Every response is JSON; failures use ``{"error": "..."}``
with the status carried by the raised exception.

Routes:
    POST    /api/search   - fan-out search ``{platforms, body}``
    GET     /api/users    - handle lookup ``?q=a,b&platforms=...``
    GET     /api/report   - profile report ``?platform=&userId=``
    OPTIONS /api/search, /api/users - CORS preflight
    GET     /health       - liveness
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from influencer_search.application.report import REPORT_UNAVAILABLE
from influencer_search.container import ApplicationContainer, create_container
from influencer_search.core.exceptions import (
    ConfigurationError,
    InfluencerSearchError,
    InvalidPayloadError,
    UpstreamError,
)
from influencer_search.domain.entities import Platform

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = 8000
CORS_METHODS = "GET,POST,OPTIONS"
CORS_HEADERS = "Content-Type, Authorization"
CORS_MAX_AGE = 86400


# Pydantic models for API requests/responses
class SearchRequest(BaseModel):
    """Inbound search payload."""

    platforms: list[str] = Field(min_length=1)
    body: dict[str, Any]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    platforms: list[str]


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Max-Age": str(CORS_MAX_AGE),
        "Vary": "Origin",
    }


def _origin(request: Request) -> str:
    return request.app.state.container.config.cors_allow_origin() or "*"


def _json(request: Request, content: dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(content, status_code=status_code, headers=cors_headers(_origin(request)))


def _error(request: Request, message: str, status_code: int) -> JSONResponse:
    return _json(request, {"error": message}, status_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    container: ApplicationContainer = app.state.container
    logger.info(
        f"Initializing search API: base_url={container.config.base_url()} "
        f"relax_fallback={container.config.relax_fallback()}"
    )
    if not container.config.api_key():
        logger.warning("MODASH_API_KEY is not set; upstream routes will answer 500")

    yield

    logger.info("Search API shutting down")
    if container.config.api_key():
        await container.modash_client().close()


def create_api_server(container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create the FastAPI server.

    Args:
        container: Pre-configured DI container (defaults to one built from
            the environment)

    Returns:
        Configured FastAPI instance.
    """
    container = container or create_container()

    app = FastAPI(
        title="Influencer Search API",
        description="Multi-platform influencer search with normalization and deduplication.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    @app.exception_handler(InfluencerSearchError)
    async def handle_search_error(request: Request, exc: InfluencerSearchError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return _error(request, str(exc), exc.status_code)

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", platforms=Platform.values())

    @app.options("/api/search")
    @app.options("/api/users")
    async def preflight(request: Request) -> Response:
        return Response(status_code=204, headers=cors_headers(_origin(request)))

    @app.post("/api/search")
    async def search(request: Request) -> JSONResponse:
        """
        Fan a search body out to the selected platforms.

        Returns ``{results, total, unique}`` plus page info when known.
        """
        gateway = request.app.state.container.search_gateway()

        try:
            payload = await request.json()
        except ValueError:
            return _error(request, "Invalid JSON body", 400)

        try:
            parsed = SearchRequest.model_validate(payload)
        except PydanticValidationError:
            return _error(request, "Provide { platforms, body }", 400)

        platforms = gateway.parse_platforms(parsed.platforms)
        response = await gateway.search(platforms, parsed.body)
        return _json(request, response.to_dict())

    @app.get("/api/users")
    async def lookup_users(
        request: Request,
        q: str = Query(default="", description="Comma-separated handles or names"),
        platforms: str = Query(default="", description="Comma-separated platforms"),
        strict: str = Query(default="0", description="1 keeps exact handle matches only"),
        match: str = Query(default="exact-first", description="exact or exact-first"),
    ) -> JSONResponse:
        """Look up accounts by handle across platforms."""
        lookup = request.app.state.container.handle_lookup()
        selected = [p.strip() for p in platforms.split(",") if p.strip()]
        users = await lookup.lookup(q, selected, strict=strict == "1", match=match)
        return _json(request, {"results": [u.to_dict() for u in users]})

    @app.get("/api/report")
    async def get_report(
        request: Request,
        platform: str = Query(default=""),
        user_id: str = Query(default="", alias="userId"),
        calculation_method: str | None = Query(default=None, alias="calculationMethod"),
    ) -> JSONResponse:
        """Proxy the full profile report; sensitive upstream errors are masked."""
        try:
            service = request.app.state.container.report_service()
        except ConfigurationError:
            return _error(request, REPORT_UNAVAILABLE, 500)

        try:
            report = await service.fetch(platform, user_id, calculation_method)
        except UpstreamError as e:
            return _error(request, str(e), e.upstream_status)
        except InvalidPayloadError as e:
            return _error(request, str(e), 400)
        return _json(request, report)


def run_api_server(host: str = "127.0.0.1", port: int = DEFAULT_API_PORT) -> None:
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: 127.0.0.1 for local only)
        port: Port to bind to (default: 8000)
    """
    import uvicorn

    logger.info(f"Starting HTTP API server on {host}:{port}")
    uvicorn.run(create_api_server(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Influencer Search HTTP API Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=DEFAULT_API_PORT, help="Port to bind to")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_api_server(host=args.host, port=args.port)
