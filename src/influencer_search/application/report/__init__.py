"""
Report Application Module

Profile report proxy with sensitive error masking.
"""

from __future__ import annotations

from .service import (
    REPORT_UNAVAILABLE,
    ReportService,
    mask_error_message,
    normalize_calculation_method,
)

__all__ = [
    "REPORT_UNAVAILABLE",
    "ReportService",
    "mask_error_message",
    "normalize_calculation_method",
]
