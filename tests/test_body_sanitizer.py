"""Tests for per-platform body sanitizers."""

from __future__ import annotations

import copy

import pytest

from influencer_search.application.search.body_sanitizer import (
    DEFAULT_SORT,
    DefaultBodySanitizer,
    YouTubeBodySanitizer,
    get_sanitizer,
    register_sanitizer,
    sanitize,
    sanitize_youtube_body,
)
from influencer_search.core.exceptions import UnsupportedPlatformError
from influencer_search.domain.entities import Platform


def _body(**influencer):
    return {"page": 2, "filter": {"influencer": influencer}}


# ============================================================
# YouTube strict mode
# ============================================================


class TestYouTubeStrict:
    def test_last_posted_clamped_to_30(self):
        out = sanitize_youtube_body(_body(lastposted=10))
        assert out["filter"]["influencer"]["lastposted"] == 30

    def test_last_posted_kept_when_above_minimum(self):
        out = sanitize_youtube_body(_body(lastposted=90))
        assert out["filter"]["influencer"]["lastposted"] == 90

    @pytest.mark.parametrize("value", [10.5, "12.2", 0.1])
    def test_fractional_last_posted_clamped(self, value):
        out = sanitize_youtube_body(_body(lastposted=value))
        assert out["filter"]["influencer"]["lastposted"] == 30

    def test_fractional_last_posted_rounded_up(self):
        out = sanitize_youtube_body(_body(lastposted=45.2))
        assert out["filter"]["influencer"]["lastposted"] == 46

    def test_last_posted_non_numeric_dropped(self):
        out = sanitize_youtube_body(_body(lastposted="recent"))
        assert "lastposted" not in out["filter"]["influencer"]

    def test_valid_age_kept(self):
        out = sanitize_youtube_body(_body(age={"min": 18, "max": 35}))
        assert out["filter"]["influencer"]["age"] == {"min": 18, "max": 35}

    def test_invalid_age_bound_drops_age(self):
        out = sanitize_youtube_body(_body(age={"min": 21, "max": 35}))
        assert "age" not in out["filter"]["influencer"]

    def test_single_valid_bound_kept(self):
        out = sanitize_youtube_body(_body(age={"min": 25}))
        assert out["filter"]["influencer"]["age"] == {"min": 25}

    def test_empty_age_dropped(self):
        out = sanitize_youtube_body(_body(age={}))
        assert "age" not in out["filter"]["influencer"]

    def test_audience_age_wins_over_age_range(self):
        body = {"filter": {"audience": {"age": [{"id": "18-24", "weight": 0.3}], "ageRange": {"min": "18"}}}}
        out = sanitize_youtube_body(body)
        assert "age" in out["filter"]["audience"]
        assert "ageRange" not in out["filter"]["audience"]

    def test_age_range_alone_kept(self):
        body = {"filter": {"audience": {"ageRange": {"min": "18"}}}}
        out = sanitize_youtube_body(body)
        assert out["filter"]["audience"]["ageRange"] == {"min": "18"}

    def test_filter_operations_removed_everywhere(self):
        body = {
            "filterOperations": [{"op": "x"}],
            "filter": {"filterOperations": [1], "influencer": {"filterOperations": [2]}},
        }
        out = sanitize_youtube_body(body)
        assert "filterOperations" not in out
        assert "filterOperations" not in out["filter"]
        assert "filterOperations" not in out["filter"]["influencer"]

    def test_sort_defaulted_when_missing(self):
        out = sanitize_youtube_body({})
        assert out["sort"] == DEFAULT_SORT
        assert out["page"] == 0

    def test_existing_sort_kept(self):
        sort = {"field": "engagementRate", "direction": "desc"}
        out = sanitize_youtube_body({"sort": sort})
        assert out["sort"] == sort

    def test_page_preserved(self):
        assert sanitize_youtube_body({"page": 3})["page"] == 3

    def test_input_not_mutated(self):
        body = _body(lastposted=5, age={"min": 21}, filterOperations=[1])
        body["filter"]["audience"] = {"age": [1], "ageRange": {}}
        snapshot = copy.deepcopy(body)
        sanitize_youtube_body(body)
        sanitize_youtube_body(body, relax=True)
        assert body == snapshot


# ============================================================
# YouTube relax mode
# ============================================================


class TestYouTubeRelax:
    def test_relax_drops_audience_and_strict_keys(self):
        body = {
            "sort": {"field": "engagementRate", "direction": "desc"},
            "filter": {
                "influencer": {
                    "followers": {"min": 1000},
                    "viewsGrowthRate": {"interval": "i1month"},
                    "followersGrowthRate": {"interval": "i1month"},
                    "views": {"min": 10},
                    "engagementRate": 0.02,
                    "lastposted": 60,
                    "lastPostAgeDaysMax": 60,
                },
                "audience": {"language": {"id": "en"}},
            },
        }
        out = sanitize_youtube_body(body, relax=True)
        influencer = out["filter"]["influencer"]
        assert "audience" not in out["filter"]
        assert influencer == {"followers": {"min": 1000}}
        assert out["sort"] == DEFAULT_SORT

    def test_relax_without_filter(self):
        out = sanitize_youtube_body({"page": 1}, relax=True)
        assert out == {"page": 1, "sort": DEFAULT_SORT}


# ============================================================
# Registry
# ============================================================


class TestRegistry:
    def test_default_sanitizer_only_sets_page(self):
        body = {"filter": {"influencer": {"lastposted": 5}}, "filterOperations": [1]}
        out = sanitize("instagram", body)
        assert out == {**body, "page": 0}
        assert out is not body

    def test_youtube_registered(self):
        assert isinstance(get_sanitizer(Platform.YOUTUBE), YouTubeBodySanitizer)
        assert isinstance(get_sanitizer("tiktok"), DefaultBodySanitizer)

    def test_register_custom_sanitizer(self):
        class Tagging:
            def sanitize(self, body, *, relax=False):
                return {**body, "tagged": relax}

        register_sanitizer("tiktok", Tagging())
        try:
            assert sanitize("tiktok", {}, relax=True) == {"tagged": True}
        finally:
            register_sanitizer("tiktok", DefaultBodySanitizer())

    def test_unknown_platform_rejected(self):
        with pytest.raises(UnsupportedPlatformError):
            sanitize("myspace", {})
