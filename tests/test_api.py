"""Tests for the HTTP routers (engines injected through dependency overrides)."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from artisan_discovery.api.deps import get_recommendation_engine, get_search_engine
from artisan_discovery.domain.services.profile_svc import UserProfileBuilder
from artisan_discovery.domain.services.recommendation_svc import RecommendationEngine
from artisan_discovery.domain.services.search_svc import SearchEngine
from artisan_discovery.main import app
from conftest import FakeInteractionStore


@pytest.fixture
def search_engine(listings, analytics):
    return SearchEngine(listings, analytics)


@pytest.fixture
def client(listings, analytics, search_engine):
    interactions = FakeInteractionStore(trending=["vase", "ring"])
    profiles = UserProfileBuilder(listings, interactions, analytics)
    reco = RecommendationEngine(listings, interactions, analytics, profiles)

    app.dependency_overrides[get_search_engine] = lambda: search_engine
    app.dependency_overrides[get_recommendation_engine] = lambda: reco
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_search_endpoint(client) -> None:
    resp = client.post("/api/search", json={"query": "blue ceramic mug", "limit": 10})

    assert resp.status_code == 200
    body = resp.json()
    assert body["results"][0]["id"] == "mug"
    assert body["total_count"] == len(body["results"])
    assert body["cache_hit"] is False
    assert body["analytics"]["query"] == "blue ceramic mug"


def test_search_validation_error(client) -> None:
    resp = client.post("/api/search", json={"query": "mug", "limit": 500})
    assert resp.status_code == 422


def test_search_failure_is_503(client, listings) -> None:
    listings.fail_search = True
    resp = client.post("/api/search", json={"query": "mug"})

    assert resp.status_code == 503
    assert resp.json()["detail"] == "Search unavailable"


def test_search_unavailable_without_engine() -> None:
    app.dependency_overrides.clear()
    resp = TestClient(app).post("/api/search", json={"query": "mug"})
    assert resp.status_code == 503


def test_click_endpoint(client, analytics) -> None:
    resp = client.post("/api/search/search_1/clicks", json={"result_id": "mug", "position": 0})

    assert resp.status_code == 202
    assert analytics.clicks == [("search_1", "mug", 0)]


def test_search_analytics_endpoint(client) -> None:
    client.post("/api/search", json={"query": "mug"})
    resp = client.get("/api/search/analytics", params={"time_range": "1h"})

    assert resp.status_code == 200
    assert resp.json()["total_searches"] == 1


def test_search_analytics_rejects_unknown_range(client) -> None:
    resp = client.get("/api/search/analytics", params={"time_range": "1y"})
    assert resp.status_code == 422


def test_clear_cache_endpoint(client, search_engine, monkeypatch) -> None:
    cleanup = AsyncMock()
    monkeypatch.setattr(search_engine, "cleanup", cleanup)

    resp = client.delete("/api/search/cache")
    assert resp.status_code == 200
    cleanup.assert_awaited_once()


def test_recommendations_endpoint(client) -> None:
    resp = client.post("/api/recommendations", json={"context": "search_results"})

    assert resp.status_code == 200
    body = resp.json()
    assert [r["item"]["id"] for r in body["recommendations"]] == ["vase", "ring"]
    assert body["analytics"]["context"] == "search_results"


def test_recommendations_unknown_context(client) -> None:
    resp = client.post("/api/recommendations", json={"context": "email"})
    assert resp.status_code == 422
