"""
Tests for the SQLAlchemy store against an in-memory SQLite database.
"""

from datetime import timedelta

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aeo_engine.database import (
    Base,
    BrandCompetitorRecord,
    BrandRecord,
    CitationRecordRow,
    CompetitorMetricRecord,
    GeneratedQueryRecord,
    MetricFactRecord,
    RecommendationGenerationRecord,
    RecommendationRecord,
    SqlMetricsStore,
)
from aeo_engine.errors import DataFetchError, PersistenceError
from aeo_engine.recommendations import Recommendation

from conftest import NOW


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    db.add(BrandRecord(
        id="brand-1",
        customer_id="cust-1",
        name="Acme",
        homepage_url="https://www.acme.com/",
        brand_metadata={"brand_aliases": '["AcmeCorp", " "]'},
    ))
    db.add_all([
        BrandCompetitorRecord(id="c-2", brand_id="brand-1", competitor_name="Contoso",
                              competitor_url="contoso.com", display_order=1),
        BrandCompetitorRecord(id="c-1", brand_id="brand-1", competitor_name="Rival",
                              competitor_url="https://rival.com", display_order=0),
    ])
    db.add_all([
        GeneratedQueryRecord(id="q1", brand_id="brand-1", customer_id="cust-1",
                             query_text="Is Acme better than Rival?", topic="Payroll"),
        GeneratedQueryRecord(id="q2", brand_id="brand-1", customer_id="cust-1",
                             query_text="What does Acme cost?", topic="Pricing"),
    ])
    db.add_all([
        MetricFactRecord(id="f1", brand_id="brand-1", customer_id="cust-1", query_id="q1",
                         collector_type="ChatGPT", processed_at=NOW - timedelta(days=2),
                         visibility_index=0.4, share_of_answer=20, sentiment_score=70),
        MetricFactRecord(id="f2", brand_id="brand-1", customer_id="cust-1", query_id="q2",
                         collector_type="Perplexity", processed_at=NOW - timedelta(days=1)),
        MetricFactRecord(id="f-old", brand_id="brand-1", customer_id="cust-1", query_id="q1",
                         collector_type="ChatGPT", processed_at=NOW - timedelta(days=90),
                         visibility_index=10),
    ])
    db.add_all([
        CompetitorMetricRecord(metric_fact_id="f1", competitor_id="c-1",
                               visibility_index=60, share_of_answer=45, sentiment_score=65),
        CompetitorMetricRecord(metric_fact_id="f2", competitor_id="c-2", visibility_index=30),
    ])
    db.add_all([
        CitationRecordRow(query_id="q1", customer_id="cust-1", domain="reddit.com",
                          page_url="https://reddit.com/r/payroll", usage_count=2),
        CitationRecordRow(query_id="q1", customer_id="cust-1", domain="rival.com",
                          page_url="https://rival.com/pricing", usage_count=7),
        CitationRecordRow(query_id="q2", customer_id="other", domain="g2.com",
                          page_url="https://g2.com/acme", usage_count=3),
    ])
    db.commit()
    db.close()
    return session_factory


@pytest.fixture
def store(seeded):
    return SqlMetricsStore(session_factory=seeded)


class TestReads:

    def test_get_brand(self, store):
        brand = store.get_brand("brand-1", "cust-1")

        assert brand.name == "Acme"
        assert brand.aliases == ["AcmeCorp"]
        assert brand.domain == "acme.com"

    def test_get_brand_wrong_tenant(self, store):
        assert store.get_brand("brand-1", "other") is None
        assert store.get_brand("missing") is None

    def test_competitors_in_display_order(self, store):
        competitors = store.get_competitors("brand-1")
        assert [(c.id, c.name) for c in competitors] == [("c-1", "Rival"), ("c-2", "Contoso")]

    def test_metric_samples(self, store):
        samples = store.fetch_metric_samples("brand-1", "cust-1", NOW - timedelta(days=30), NOW)

        assert [s.query_id for s in samples] == ["q1", "q2"]
        first, second = samples
        assert first.query_text == "Is Acme better than Rival?"
        assert first.topic == "Payroll"
        assert first.brand_visibility == 0.4
        assert first.competitors["Rival"].share_of_answer == 45
        assert not second.has_brand_data
        assert second.competitors["Contoso"].visibility == 30

    def test_metric_samples_collector_filter(self, store):
        samples = store.fetch_metric_samples(
            "brand-1", "cust-1", NOW - timedelta(days=30), NOW, collector_types=["Perplexity"],
        )
        assert [s.query_id for s in samples] == ["q2"]

    def test_metric_samples_tenant_filter(self, store):
        assert store.fetch_metric_samples("brand-1", "other", NOW - timedelta(days=30), NOW) == []

    def test_citations_by_usage(self, store):
        citations = store.fetch_citations(["q1", "q2"])

        assert [(c.domain, c.usage_count) for c in citations] == [
            ("rival.com", 7), ("g2.com", 3), ("reddit.com", 2),
        ]
        assert citations[0].url == "https://rival.com/pricing"

    def test_citations_tenant_filter(self, store):
        assert [c.domain for c in store.fetch_citations(["q1", "q2"], "cust-1")] == ["rival.com", "reddit.com"]

    def test_citations_empty_ids(self, store):
        assert store.fetch_citations([]) == []

    def test_read_failure_wrapped(self, engine, store):
        Base.metadata.drop_all(bind=engine)
        with pytest.raises(DataFetchError):
            store.get_brand("brand-1")


class TestSaveRecommendationBatch:

    def _recommendation(self, query_id, action="Publish a comparison", order=0):
        return Recommendation(
            query_id=query_id,
            action=action,
            channel="acme.com",
            content_type="Comparison Table",
            asset_type="comparison",
            confidence=80,
            target_competitors=["Rival"],
            focus_area="soa",
            kpi="soa",
            priority="High",
            display_order=order,
        )

    def test_saves_generation_and_recommendations(self, store, seeded):
        generation_id = store.save_recommendation_batch(
            "brand-1", "cust-1",
            [self._recommendation("q1"), self._recommendation("q2", order=1)],
            metadata={"source": "test"},
        )

        db = seeded()
        generation = db.get(RecommendationGenerationRecord, generation_id)
        assert generation.problems_detected == 2
        assert generation.generation_metadata == {"source": "test"}
        assert [r.query_id for r in generation.recommendations] == ["q1", "q2"]
        assert generation.recommendations[0].target_competitors == ["Rival"]
        db.close()

    def test_failure_rolls_back_everything(self, store, seeded):
        with pytest.raises(PersistenceError):
            store.save_recommendation_batch(
                "brand-1", "cust-1",
                [self._recommendation("q1"), self._recommendation("q2", action=None)],
            )

        db = seeded()
        assert db.execute(select(func.count()).select_from(RecommendationGenerationRecord)).scalar() == 0
        assert db.execute(select(func.count()).select_from(RecommendationRecord)).scalar() == 0
        db.close()
