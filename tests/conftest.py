"""
Pytest Configuration and Shared Fixtures

In-memory fakes for the store and generative-text boundaries plus a small
brand fixture with three queries (one per category).
"""

import pytest
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from aeo_engine.analyzer import GenerativeTextClient
from aeo_engine.errors import DataFetchError, GenerativeTextError, PersistenceError
from aeo_engine.models import (
    Brand,
    CitationRecord,
    Competitor,
    CompetitorSample,
    MetricSample,
    MetricsStore,
    RecommendationStore,
)


NOW = datetime.utcnow().replace(microsecond=0)


# ============================================================================
# Fakes
# ============================================================================

class FakeStore(MetricsStore, RecommendationStore):
    """Dict-backed store. Set the *_error attributes to simulate failures."""

    def __init__(
        self,
        brands: Optional[Dict[str, Brand]] = None,
        competitors: Optional[Dict[str, List[Competitor]]] = None,
        samples: Optional[List[MetricSample]] = None,
        citations: Optional[List[CitationRecord]] = None,
    ):
        self.brands = brands or {}
        self.competitors = competitors or {}
        self.samples = samples or []
        self.citations = citations or []
        self.saved: List[Dict[str, Any]] = []

        self.metric_error = False
        self.citation_error = False
        self.save_error = False

        self.sample_calls: List[Dict[str, Any]] = []
        self.citation_calls: List[List[str]] = []

    def get_brand(self, brand_id, customer_id=None):
        brand = self.brands.get(brand_id)
        if brand is None:
            return None
        if customer_id and brand.customer_id != customer_id:
            return None
        return brand

    def get_competitors(self, brand_id, customer_id=None):
        return list(self.competitors.get(brand_id, []))

    def fetch_metric_samples(self, brand_id, customer_id, start, end, collector_types=None):
        self.sample_calls.append({
            "brand_id": brand_id,
            "start": start,
            "end": end,
            "collector_types": collector_types,
        })
        if self.metric_error:
            raise DataFetchError("metrics unavailable")
        return [
            s for s in self.samples
            if start <= s.processed_at <= end
            and (not collector_types or s.collector_type in collector_types)
        ]

    def fetch_citations(self, query_ids: Sequence[str], customer_id=None):
        self.citation_calls.append(list(query_ids))
        if self.citation_error:
            raise DataFetchError("citations unavailable")
        return [c for c in self.citations if c.query_id in query_ids]

    def save_recommendation_batch(self, brand_id, customer_id, recommendations, metadata=None):
        if self.save_error:
            raise PersistenceError("write failed")
        generation_id = f"gen-{len(self.saved) + 1}"
        self.saved.append({
            "generation_id": generation_id,
            "brand_id": brand_id,
            "customer_id": customer_id,
            "recommendations": list(recommendations),
            "metadata": metadata,
        })
        return generation_id


class FakeLLM(GenerativeTextClient):
    """Returns canned items per system prompt kind and records every call."""

    def __init__(
        self,
        domain_items: Optional[List[Dict[str, Any]]] = None,
        recommendation_items: Optional[List[Dict[str, Any]]] = None,
        fail: bool = False,
    ):
        self.domain_items = domain_items or []
        self.recommendation_items = recommendation_items or []
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def generate_json_array(self, prompt, system=None, max_tokens=None):
        self.calls.append({"prompt": prompt, "system": system, "max_tokens": max_tokens})
        if self.fail:
            raise GenerativeTextError("service down")
        if system and "Content Strategist" in system:
            return list(self.domain_items)
        return list(self.recommendation_items)


# ============================================================================
# Sample data
# ============================================================================

def make_sample(query_id, text, days_ago=1, topic="Payroll", collector="ChatGPT",
                visibility=None, soa=None, sentiment=None, competitors=None):
    return MetricSample(
        query_id=query_id,
        query_text=text,
        topic=topic,
        collector_type=collector,
        processed_at=NOW - timedelta(days=days_ago),
        brand_visibility=visibility,
        brand_share_of_answer=soa,
        brand_sentiment=sentiment,
        competitors=competitors or {},
    )


Q1_TEXT = "Is Acme better than Rival for payroll?"
Q2_TEXT = "What does Acme cost?"
Q3_TEXT = "Best payroll software for startups"


@pytest.fixture
def brand() -> Brand:
    return Brand(
        id="brand-1",
        name="Acme",
        customer_id="cust-1",
        aliases=["AcmeCorp"],
        homepage_url="https://www.acme.com/",
    )


@pytest.fixture
def competitors() -> List[Competitor]:
    return [
        Competitor(id="c-1", name="Rival", domain="https://rival.com"),
        Competitor(id="c-2", name="Contoso", domain="contoso.com"),
    ]


@pytest.fixture
def samples() -> List[MetricSample]:
    """
    q1 (category 1): soa 10 vs Rival 45, everything else healthy
    q2 (category 2): visibility averages 25, one competitor-only sample
    q3 (category 3): visibility 20 vs Rival 50, Contoso exactly 3 points ahead
    """
    return [
        make_sample("q1", Q1_TEXT, visibility=0.5, soa=10, sentiment=80, competitors={
            "Rival": CompetitorSample(visibility=52, share_of_answer=45, sentiment=70),
        }),
        make_sample("q2", Q2_TEXT, visibility=20, soa=60, sentiment=65),
        make_sample("q2", Q2_TEXT, days_ago=2, visibility=30, soa=60, sentiment=65),
        make_sample("q2", Q2_TEXT, days_ago=3, competitors={
            "Rival": CompetitorSample(visibility=90),
        }),
        make_sample("q3", Q3_TEXT, topic="Startups", collector="Perplexity",
                    visibility=20, soa=30, sentiment=50, competitors={
            "Rival": CompetitorSample(visibility=50, share_of_answer=30, sentiment=50),
            "Contoso": CompetitorSample(visibility=23, share_of_answer=30, sentiment=50),
        }),
    ]


@pytest.fixture
def citations() -> List[CitationRecord]:
    return [
        CitationRecord("q3", "reddit.com", "https://reddit.com/r/payroll/1", 5),
        CitationRecord("q3", "rival.com", "https://rival.com/pricing", 3),
        CitationRecord("q3", "youtube.com", "https://youtube.com/watch?v=x", 2),
        CitationRecord("q3", "reddit.com", "https://reddit.com/r/payroll/2", 1),
        CitationRecord("q1", "techcrunch.com", "https://techcrunch.com/payroll", 4),
    ]


@pytest.fixture
def store(brand, competitors, samples, citations) -> FakeStore:
    return FakeStore(
        brands={brand.id: brand},
        competitors={brand.id: competitors},
        samples=samples,
        citations=citations,
    )


@pytest.fixture
def recommendation_items() -> List[Dict[str, Any]]:
    return [
        {
            "queryId": "q3",
            "ThoughtProcess": "Rival dominates startup roundups",
            "Recommendation": "Post an expert answer comparing payroll tools",
            "Channel": "reddit.com",
            "ContentType": "Expert Community Response",
            "ContentTitle": "What we learned running payroll for 200 startups",
            "Timeline": "2 weeks",
            "Effort": "low",
            "ExpectedBoost": "+10 visibility",
            "Confidence": 82.6,
            "Amplification": "Answer follow-up questions within 24h",
        },
        {
            "queryId": "q1",
            "Recommendation": "Publish a head-to-head comparison",
            "Channel": "acme.com",
            "ContentType": "Technical Comparison Table",
            "Effort": "enormous",
            "Confidence": "n/a",
        },
        {
            "queryId": "q1",
            "Recommendation": "Duplicate for the same query",
        },
        {
            "queryId": "q-unknown",
            "Recommendation": "Should be dropped",
        },
    ]
