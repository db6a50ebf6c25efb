"""
Tests for the HTTP API with the store and generative-text dependencies
overridden by in-memory fakes.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.opportunities import get_llm, get_store

from conftest import FakeLLM


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_llm] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestOpportunitiesEndpoint:

    def test_ranked_opportunities(self, client):
        response = client.get("/api/brands/brand-1/opportunities", params={"customer_id": "cust-1"})

        assert response.status_code == 200
        data = response.json()
        assert [o["id"] for o in data["opportunities"]] == [
            "q3-visibility-rival", "q1-soa-rival", "q2-visibility",
        ]
        assert data["total_analyzed_queries"] == 3

    def test_filters_passed_through(self, client, store):
        response = client.get(
            "/api/brands/brand-1/opportunities",
            params={"customer_id": "cust-1", "days": 7, "collectors": "perplexity, ", "topics": "startups"},
        )

        assert response.status_code == 200
        assert [o["query_id"] for o in response.json()["opportunities"]] == ["q3"]
        assert store.sample_calls[0]["collector_types"] == ["Perplexity"]

    def test_unknown_brand(self, client):
        response = client.get("/api/brands/missing/opportunities")
        assert response.status_code == 404

    def test_days_validated(self, client):
        response = client.get("/api/brands/brand-1/opportunities", params={"days": 0})
        assert response.status_code == 422


class TestRecommendationsEndpoint:

    def test_llm_not_configured(self, client, store):
        response = client.post("/api/brands/brand-1/recommendations", json={"customer_id": "cust-1"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["status"] == "generation_failed"
        assert store.saved == []

    def test_generates_and_stores(self, client, store, recommendation_items):
        app.dependency_overrides[get_llm] = lambda: FakeLLM(recommendation_items=recommendation_items)

        response = client.post("/api/brands/brand-1/recommendations", json={"customer_id": "cust-1"})

        data = response.json()
        assert data["success"] is True
        assert data["generation_id"] == "gen-1"
        assert [r["query_id"] for r in data["recommendations"]] == ["q3", "q1"]

    def test_unknown_brand(self, client):
        response = client.post("/api/brands/missing/recommendations", json={})
        assert response.status_code == 404


class TestScoreEndpoint:

    def test_score(self, client):
        response = client.post("/api/aeo/score", json={
            "content_type": "comparison-table",
            "content": "Acme vs Rival\n\nAcme has better pricing.",
            "reference_year": 2025,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["content_type"] == "comparison_table"
        assert data["max_score"] == 70
        assert data["breakdown"]["table_structure"]["status"] == "error"

    def test_unknown_type_scored_as_article(self, client):
        response = client.post("/api/aeo/score", json={"content_type": "infographic", "content": ""})

        assert response.json()["content_type"] == "article"
        assert response.json()["total_score"] == 0


class TestHealth:

    def test_health(self, client):
        with patch("api.main.check_db_connection", return_value=False):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "disconnected"
