"""
Infrastructure Layer - External Systems Integration

Contains:
- http: async client for the platform search backends
"""

from .http import ModashClient, UpstreamResponse

__all__ = [
    "ModashClient",
    "UpstreamResponse",
]
