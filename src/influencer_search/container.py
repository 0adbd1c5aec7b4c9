"""
Application DI Container (dependency-injector).

Centralizes service creation and lifecycle management. Settings are read
from the environment once by ``settings_from_env`` and loaded into
``container.config``.

Usage::

    from influencer_search.container import ApplicationContainer, settings_from_env

    container = ApplicationContainer()
    container.config.from_dict(settings_from_env())

    gateway = container.search_gateway()

    # In tests, override any provider:
    container.search_gateway.override(providers.Object(mock_gateway))
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from dependency_injector import containers, providers

from influencer_search.core.exceptions import ConfigurationError, ErrorContext
from influencer_search.infrastructure.http.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUTHY


def _float(value: str | None, default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        logger.warning(f"Invalid UPSTREAM_TIMEOUT {value!r}, using {default}")
        return default


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read service settings from environment variables."""
    env = os.environ if environ is None else environ
    return {
        "api_key": env.get("MODASH_API_KEY") or None,
        "base_url": env.get("MODASH_BASE_URL") or DEFAULT_BASE_URL,
        "relax_fallback": _flag(env.get("SEARCH_RELAX_FALLBACK"), True),
        "timeout": _float(env.get("UPSTREAM_TIMEOUT"), DEFAULT_TIMEOUT),
        "cors_allow_origin": env.get("CORS_ALLOW_ORIGIN") or "*",
    }


def _create_client(api_key: str | None, base_url: str | None, timeout: float | None) -> object:
    """Lazy factory for ModashClient; a missing credential is a configuration error."""
    from influencer_search.infrastructure.http import ModashClient

    if not api_key:
        raise ConfigurationError(
            "Missing MODASH_API_KEY",
            context=ErrorContext(suggestion="Set the MODASH_API_KEY environment variable"),
        )
    return ModashClient(
        api_key=api_key,
        base_url=base_url or DEFAULT_BASE_URL,
        timeout=timeout or DEFAULT_TIMEOUT,
    )


def _create_gateway(client: object, relax_fallback: bool | None) -> object:
    """Lazy factory for SearchGateway."""
    from influencer_search.application.search import SearchGateway

    return SearchGateway(client, relax_fallback=bool(relax_fallback))  # type: ignore[arg-type]


def _create_handle_lookup(client: object) -> object:
    """Lazy factory for HandleLookup."""
    from influencer_search.application.search import HandleLookup

    return HandleLookup(client)  # type: ignore[arg-type]


def _create_report_service(client: object) -> object:
    """Lazy factory for ReportService."""
    from influencer_search.application.report import ReportService

    return ReportService(client)  # type: ignore[arg-type]


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the influencer search service.

    Manages creation and lifecycle of all core services:
    - ``modash_client``: upstream HTTP client (needs ``api_key``)
    - ``search_gateway``: multi-platform search fan-out
    - ``handle_lookup``: handle/name lookup
    - ``report_service``: profile report proxy
    """

    config = providers.Configuration()

    modash_client = providers.Singleton(
        _create_client,
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout,
    )

    search_gateway = providers.Singleton(
        _create_gateway,
        client=modash_client,
        relax_fallback=config.relax_fallback,
    )

    handle_lookup = providers.Singleton(
        _create_handle_lookup,
        client=modash_client,
    )

    report_service = providers.Singleton(
        _create_report_service,
        client=modash_client,
    )


def create_container(settings: Mapping[str, Any] | None = None) -> ApplicationContainer:
    """Build a container loaded with ``settings`` (defaults to the environment)."""
    container = ApplicationContainer()
    container.config.from_dict(dict(settings if settings is not None else settings_from_env()))
    return container


__all__ = ["ApplicationContainer", "create_container", "settings_from_env"]
