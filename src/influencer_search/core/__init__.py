"""
Core module for Influencer Search.

Provides:
- Unified exception hierarchy
"""

from .exceptions import (
    # API errors
    APIError,
    # Configuration errors
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    # Base
    InfluencerSearchError,
    # Validation errors
    InvalidPayloadError,
    NetworkError,
    UnsupportedPlatformError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "APIError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "InfluencerSearchError",
    "InvalidPayloadError",
    "NetworkError",
    "UnsupportedPlatformError",
    "UpstreamError",
    "ValidationError",
]
