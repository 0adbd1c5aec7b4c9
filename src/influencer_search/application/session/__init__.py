"""Client Search Session."""

from __future__ import annotations

from .controller import (
    DEFAULT_MAX_PAGES,
    GatewayTransport,
    SearchController,
    SearchState,
)

__all__ = [
    "DEFAULT_MAX_PAGES",
    "GatewayTransport",
    "SearchController",
    "SearchState",
]
