"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from influencer_search.infrastructure.http import UpstreamResponse

# ============================================================
# Raw Upstream Records
# ============================================================


@pytest.fixture
def youtube_record():
    """Raw YouTube search record (nested profile, stats block)."""
    return {
        "userId": "UC123",
        "profile": {
            "channelHandle": "techwiser",
            "title": "TechWiser",
            "subscribers": 2_500_000,
            "stats": {"engagementRate": 0.031, "avgViews": 120_000},
            "thumbnail": "https://img.example/yt.jpg",
            "isVerified": True,
        },
    }


@pytest.fixture
def instagram_record():
    """Raw Instagram search record (flat shape)."""
    return {
        "userId": "1789",
        "username": "audreyvictoria",
        "fullname": "Audrey Victoria",
        "followers": 1_200_000,
        "engagementRate": 0.045,
        "engagements": 54_000,
        "picture": "https://img.example/ig.jpg",
        "url": "https://instagram.com/audreyvictoria",
    }


@pytest.fixture
def tiktok_record():
    """Raw TikTok search record (profile with string numbers)."""
    return {
        "profile": {
            "username": "worldofcolorx",
            "fullname": "World of Color",
            "followers": "890000",
            "engagementRate": "0.12",
        },
    }


# ============================================================
# Fake Upstream Client
# ============================================================


@pytest.fixture
def search_client():
    """Upstream client mock; set ``search.side_effect`` per test."""
    client = AsyncMock()
    client.search = AsyncMock(return_value=UpstreamResponse(200, {"total": 0, "results": []}))
    return client
