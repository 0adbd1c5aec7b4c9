"""
HTTP clients for upstream backends.
"""

from .base_client import BaseAPIClient, UpstreamResponse
from .client import DEFAULT_BASE_URL, ModashClient

__all__ = [
    "BaseAPIClient",
    "DEFAULT_BASE_URL",
    "ModashClient",
    "UpstreamResponse",
]
