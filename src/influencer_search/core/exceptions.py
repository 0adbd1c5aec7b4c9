"""
Unified Exception Hierarchy for Influencer Search.

Exception Hierarchy:
    InfluencerSearchError (base)
    ├── APIError
    │   ├── UpstreamError
    │   └── NetworkError
    ├── ValidationError
    │   ├── InvalidPayloadError
    │   └── UnsupportedPlatformError
    └── ConfigurationError

Each error carries an HTTP status hint so the API layer can map it to a
response without a lookup table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but can retry
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""

    API = "api"
    VALIDATION = "validation"
    CONFIGURATION = "config"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""

    operation: str | None = None
    platform: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class InfluencerSearchError(Exception):
    """
    Base exception for all influencer search errors.

    Provides:
    - Structured error context
    - Severity classification
    - HTTP status hint for the API layer
    """

    __slots__ = ("context", "severity", "category", "retryable", "status_code")

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.platform:
            result["platform"] = self.context.platform
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# API Errors
# =============================================================================


class APIError(InfluencerSearchError):
    """Base class for upstream API errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = False,
        status_code: int = 502,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
            retryable=retryable,
            status_code=status_code,
        )


class UpstreamError(APIError):
    """Raised when a platform search backend answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        platform: str,
        upstream_status: int,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(operation="search", platform=platform)
        super().__init__(message, context=ctx)
        self.platform = platform
        self.upstream_status = upstream_status


class NetworkError(APIError):
    """Raised for network connectivity issues."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=True)
        self.category = ErrorCategory.NETWORK
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(InfluencerSearchError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
            status_code=400,
        )


class InvalidPayloadError(ValidationError):
    """Raised when the inbound request body is malformed."""


class UnsupportedPlatformError(ValidationError):
    """Raised when a platform identifier is not one of the supported ones."""

    def __init__(
        self,
        platform: Any,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(
            input_value=platform,
            suggestion="Use one of: instagram, tiktok, youtube",
        )
        super().__init__(f"Unsupported platform: {platform}", context=ctx)
        self.platform = platform


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(InfluencerSearchError):
    """Raised for configuration-related errors (missing credential etc.)."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
            status_code=500,
        )
