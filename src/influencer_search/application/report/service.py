"""
Report Service - Profile report proxy with error masking.

Fetches the full analytics report for one account. Successful reports are
passed through untouched; upstream failure messages that leak credential
or provider details are replaced by a generic message.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol

from influencer_search.core.exceptions import (
    ErrorContext,
    InvalidPayloadError,
    UnsupportedPlatformError,
    UpstreamError,
)
from influencer_search.domain.entities import Platform
from influencer_search.infrastructure.http import UpstreamResponse

logger = logging.getLogger(__name__)

REPORT_UNAVAILABLE = "Report unavailable"
CALCULATION_METHODS = ("median", "average")

SENSITIVE_MESSAGE = re.compile(
    r"api token|developer section|modash|authorization|bearer|modash_api_key|marketer\.modash\.io",
    re.IGNORECASE,
)


class ReportClient(Protocol):
    async def get_report(
        self, platform: Platform | str, user_id: str, calculation_method: str = "median"
    ) -> UpstreamResponse: ...


def normalize_calculation_method(value: str | None) -> str:
    """``average`` when asked for explicitly, otherwise ``median``."""
    return "average" if (value or "").strip().lower() == "average" else "median"


def mask_error_message(message: Any) -> str:
    """Replace messages that mention tokens or the provider with a generic one."""
    if not isinstance(message, str) or not message.strip():
        return REPORT_UNAVAILABLE
    if SENSITIVE_MESSAGE.search(message):
        return REPORT_UNAVAILABLE
    return message


class ReportService:
    """Proxies profile reports from the upstream provider."""

    def __init__(self, client: ReportClient) -> None:
        self._client = client

    async def fetch(
        self,
        platform: Platform | str | None,
        user_id: str | None,
        calculation_method: str | None = None,
    ) -> dict[str, Any]:
        """
        Fetch the report for one account.

        Raises:
            InvalidPayloadError: Unknown platform or empty user id
            UpstreamError: Non-2xx upstream answer, message masked
        """
        try:
            parsed = Platform.parse(platform)
        except UnsupportedPlatformError as e:
            raise InvalidPayloadError(
                "platform must be instagram|tiktok|youtube",
                context=ErrorContext(operation="report", input_value=platform),
            ) from e

        user_id = (user_id or "").strip()
        if not user_id:
            raise InvalidPayloadError("userId is required", context=ErrorContext(operation="report"))

        method = normalize_calculation_method(calculation_method)
        response = await self._client.get_report(parsed, user_id, method)
        if not response.ok:
            raw = response.data.get("message") or response.data.get("error")
            logger.warning(f"Report {parsed.value}/{user_id} failed ({response.status_code})")
            raise UpstreamError(
                mask_error_message(raw),
                platform=parsed.value,
                upstream_status=response.status_code,
                context=ErrorContext(operation="report", platform=parsed.value, input_value=user_id),
            )

        logger.info(f"Report {parsed.value}/{user_id} fetched (calculationMethod={method})")
        return response.data
