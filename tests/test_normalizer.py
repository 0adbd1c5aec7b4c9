"""Tests for raw record normalization."""

from __future__ import annotations

import math

import pytest

from influencer_search.application.search.normalizer import (
    FIELD_EXTRACTORS,
    extract,
    normalize,
    normalize_many,
    to_number,
)
from influencer_search.domain.entities import CanonicalInfluencer, Platform

# ============================================================
# to_number
# ============================================================


class TestToNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5, 5),
            (2.5, 2.5),
            ("42", 42.0),
            (" 1e3 ", 1000.0),
        ],
    )
    def test_numeric(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, False, "", "abc", math.nan, math.inf, "inf", [], {}])
    def test_non_numeric(self, value):
        assert to_number(value) is None


# ============================================================
# Extractors
# ============================================================


class TestExtract:
    def test_first_present_key_wins(self):
        assert extract({"handle": "b", "slug": "c"}, "username") == "b"
        assert extract({"username": "a", "handle": "b"}, "username") == "a"

    def test_dotted_path(self):
        assert extract({"stats": {"followers": 10}}, "followers") == 10

    def test_every_field_has_sources(self):
        assert all(FIELD_EXTRACTORS[name] for name in FIELD_EXTRACTORS)


# ============================================================
# normalize
# ============================================================


class TestNormalize:
    def test_nested_youtube_profile(self, youtube_record):
        record = normalize(youtube_record, "youtube")
        assert record.platform is Platform.YOUTUBE
        assert record.user_id == "UC123"
        assert record.username == "techwiser"
        assert record.fullname == "TechWiser"
        assert record.followers == 2_500_000
        assert record.engagement_rate == 0.031
        assert record.average_views == 120_000
        assert record.picture == "https://img.example/yt.jpg"
        assert record.is_verified is True

    def test_flat_instagram_record(self, instagram_record):
        record = normalize(instagram_record, Platform.INSTAGRAM)
        assert record.username == "audreyvictoria"
        assert record.engagements == 54_000
        assert record.url == "https://instagram.com/audreyvictoria"
        assert record.is_private is False

    def test_string_numbers_coerced(self, tiktok_record):
        record = normalize(tiktok_record, "tiktok")
        assert record.followers == 890_000
        assert record.engagement_rate == 0.12
        assert record.user_id is None

    def test_outer_user_id_preferred(self):
        record = normalize({"userId": 7, "profile": {"id": "inner"}}, "tiktok")
        assert record.user_id == "7"

    def test_inner_id_used_without_outer(self):
        record = normalize({"profile": {"channelId": " UCx "}}, "youtube")
        assert record.user_id == "UCx"

    def test_non_finite_metrics_default(self):
        record = normalize({"username": "x", "followers": "NaN", "engagementRate": None}, "tiktok")
        assert record.followers == 0
        assert record.engagement_rate == 0
        assert record.engagements is None

    @pytest.mark.parametrize("raw", [None, "text", 42, [], {"profile": "broken"}, {"username": {"nested": 1}}])
    def test_never_raises_on_garbage(self, raw):
        record = normalize(raw, "instagram")
        assert isinstance(record, CanonicalInfluencer)
        assert math.isfinite(record.followers)
        assert math.isfinite(record.engagement_rate)

    def test_empty_record_has_no_identity(self):
        assert normalize({}, "youtube").identity_key is None

    def test_normalize_many(self, instagram_record, tiktok_record):
        records = normalize_many([instagram_record, tiktok_record], "tiktok")
        assert [r.username for r in records] == ["audreyvictoria", "worldofcolorx"]
