"""
HTTP API for the influencer search service.

Provides REST endpoints for the browser client: search fan-out, handle
lookup and the report proxy.
"""

from .server import create_api_server, run_api_server

__all__ = ["create_api_server", "run_api_server"]
