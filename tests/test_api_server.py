"""Tests for the HTTP API routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from influencer_search.api.server import create_api_server
from influencer_search.container import create_container, settings_from_env
from influencer_search.infrastructure.http import UpstreamResponse


@pytest.fixture
def upstream():
    """Upstream client mock shared by every service in the container."""
    client = AsyncMock()
    client.search = AsyncMock(return_value=UpstreamResponse(200, {"total": 0, "results": []}))
    client.list_users = AsyncMock(return_value=UpstreamResponse(200, {"users": []}))
    client.get_report = AsyncMock(return_value=UpstreamResponse(200, {"profile": {"userId": "1"}}))
    return client


@pytest.fixture
def container(upstream):
    c = create_container(settings_from_env({"MODASH_API_KEY": "k", "CORS_ALLOW_ORIGIN": "https://app.example"}))
    c.modash_client.override(providers.Object(upstream))
    return c


@pytest.fixture
def client(container):
    return TestClient(create_api_server(container))


@pytest.fixture
def keyless_client():
    return TestClient(create_api_server(create_container(settings_from_env({}))))


# ============================================================
# Health / CORS
# ============================================================


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "platforms": ["instagram", "tiktok", "youtube"]}


class TestPreflight:
    @pytest.mark.parametrize("path", ["/api/search", "/api/users"])
    def test_options_204_with_cors(self, client, path):
        response = client.options(path)
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "https://app.example"
        assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,OPTIONS"

    @pytest.mark.parametrize("path", ["/api/search", "/api/users"])
    def test_browser_preflight_204(self, client, path):
        response = client.options(
            path,
            headers={
                "Origin": "https://app.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "https://app.example"
        assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"
        assert response.content == b""


# ============================================================
# POST /api/search
# ============================================================


class TestSearchRoute:
    def test_success(self, client, upstream):
        upstream.search.return_value = UpstreamResponse(
            200, {"total": 7, "results": [{"username": "a"}, {"username": "A"}]}
        )
        response = client.post("/api/search", json={"platforms": ["instagram"], "body": {"page": 0}})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 7
        assert data["unique"] == 1
        assert data["page"] == 0
        assert data["results"][0]["platform"] == "instagram"
        assert response.headers["Access-Control-Allow-Origin"] == "https://app.example"

    def test_invalid_json(self, client):
        response = client.post("/api/search", content=b"{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}

    @pytest.mark.parametrize(
        "payload",
        [{}, {"platforms": []}, {"platforms": ["youtube"]}, {"body": {}}, {"platforms": "youtube", "body": {}}, [1]],
    )
    def test_missing_fields(self, client, payload):
        response = client.post("/api/search", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Provide { platforms, body }"}

    def test_unsupported_platform(self, client, upstream):
        response = client.post("/api/search", json={"platforms": ["youtube", "myspace"], "body": {}})
        assert response.status_code == 400
        assert response.json() == {"error": "Unsupported platform: myspace"}
        upstream.search.assert_not_awaited()

    def test_upstream_failure_502(self, client, upstream):
        upstream.search.return_value = UpstreamResponse(401, {"message": "Invalid plan"})
        response = client.post("/api/search", json={"platforms": ["tiktok"], "body": {}})
        assert response.status_code == 502
        assert response.json() == {"error": "Invalid plan"}

    def test_missing_api_key(self, keyless_client):
        response = keyless_client.post("/api/search", json={"platforms": ["tiktok"], "body": {}})
        assert response.status_code == 500
        assert response.json() == {"error": "Missing MODASH_API_KEY"}


# ============================================================
# GET /api/users
# ============================================================


class TestUsersRoute:
    def test_lookup(self, client, upstream):
        upstream.list_users.return_value = UpstreamResponse(
            200, {"users": [{"username": "techwiser2"}, {"username": "techwiser", "isVerified": True}]}
        )
        response = client.get("/api/users", params={"q": "@TechWiser", "platforms": "youtube"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert [u["username"] for u in results] == ["techwiser", "techwiser2"]
        assert results[0]["url"] == "https://www.youtube.com/@techwiser"

    def test_strict(self, client, upstream):
        upstream.list_users.return_value = UpstreamResponse(200, {"users": [{"username": "techwiser2"}]})
        response = client.get("/api/users", params={"q": "techwiser", "platforms": "youtube", "strict": "1"})
        assert response.json() == {"results": []}

    def test_missing_query(self, client):
        response = client.get("/api/users", params={"platforms": "youtube"})
        assert response.status_code == 400
        assert "Provide ?q=" in response.json()["error"]


# ============================================================
# GET /api/report
# ============================================================


class TestReportRoute:
    def test_success(self, client, upstream):
        response = client.get("/api/report", params={"platform": "instagram", "userId": "1"})
        assert response.status_code == 200
        assert response.json() == {"profile": {"userId": "1"}}
        assert upstream.get_report.await_args.args[2] == "median"

    def test_bad_platform(self, client):
        response = client.get("/api/report", params={"platform": "myspace", "userId": "1"})
        assert response.status_code == 400
        assert response.json() == {"error": "platform must be instagram|tiktok|youtube"}

    def test_masked_upstream_error_keeps_status(self, client, upstream):
        upstream.get_report.return_value = UpstreamResponse(401, {"message": "Bearer token invalid"})
        response = client.get("/api/report", params={"platform": "tiktok", "userId": "1"})
        assert response.status_code == 401
        assert response.json() == {"error": "Report unavailable"}

    def test_missing_api_key_masked(self, keyless_client):
        response = keyless_client.get("/api/report", params={"platform": "tiktok", "userId": "1"})
        assert response.status_code == 500
        assert response.json() == {"error": "Report unavailable"}


# ============================================================
# End to end: strict body empty, relaxed body answers
# ============================================================


class TestRelaxedFallbackEndToEnd:
    @pytest.fixture
    def relaxing_upstream(self, upstream):
        async def search(platform, body):
            influencer = body.get("filter", {}).get("influencer", {})
            if "lastposted" in influencer:
                assert influencer["lastposted"] == 30
                return UpstreamResponse(200, {"total": 0, "results": []})
            return UpstreamResponse(
                200,
                {
                    "total": 3,
                    "results": [
                        {"userId": "1", "username": "a"},
                        {"userId": "2", "username": "b"},
                        {"userId": "3", "username": "c"},
                    ],
                },
            )

        upstream.search.side_effect = search
        return upstream

    def _client(self, upstream, flag):
        c = create_container(settings_from_env({"MODASH_API_KEY": "k", "SEARCH_RELAX_FALLBACK": flag}))
        c.modash_client.override(providers.Object(upstream))
        return TestClient(create_api_server(c))

    def test_relaxed_results_returned(self, relaxing_upstream):
        response = self._client(relaxing_upstream, "1").post(
            "/api/search",
            json={"platforms": ["youtube"], "body": {"filter": {"influencer": {"lastposted": 5}}}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["unique"] == 3
        assert relaxing_upstream.search.await_count == 2

    def test_flag_off_keeps_empty_answer(self, relaxing_upstream):
        response = self._client(relaxing_upstream, "0").post(
            "/api/search",
            json={"platforms": ["youtube"], "body": {"filter": {"influencer": {"lastposted": 5}}}},
        )

        assert response.json()["total"] == 0
        assert response.json()["unique"] == 0
        assert relaxing_upstream.search.await_count == 1
