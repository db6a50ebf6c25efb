"""
Tests for per-query and per-competitor metric aggregation.
"""

import pytest

from aeo_engine.models import CompetitorSample, MetricSample
from aeo_engine.opportunity import MetricsAggregator, aggregate_samples, normalize_visibility

from conftest import NOW, FakeStore, make_sample


class TestNormalization:

    @pytest.mark.parametrize("raw,expected", [
        (0.0, 0.0),
        (0.25, 25.0),
        (1.0, 100.0),
        (1.5, 1.5),
        (42.0, 42.0),
        (None, None),
    ])
    def test_visibility_scale(self, raw, expected):
        assert normalize_visibility(raw) == expected

    def test_values_clamped(self):
        result = aggregate_samples([
            make_sample("q", "query", visibility=250, soa=-10, sentiment=140),
        ])
        query = result.queries[0]
        assert query.visibility == 100.0
        assert query.soa == 0.0
        assert query.sentiment == 100.0


class TestBrandAggregation:

    def test_means_over_non_null_values(self):
        result = aggregate_samples([
            make_sample("q", "query", visibility=20, soa=None, sentiment=60),
            make_sample("q", "query", visibility=40, soa=50, sentiment=None),
        ])
        query = result.queries[0]
        assert query.visibility == 30.0
        assert query.soa == 50.0
        assert query.sentiment == 60.0
        assert query.response_count == 2

    def test_metric_without_samples_is_none(self):
        result = aggregate_samples([make_sample("q", "query", visibility=20)])
        assert result.queries[0].soa is None
        assert result.queries[0].sentiment is None

    def test_samples_without_brand_data_not_counted(self, samples):
        result = aggregate_samples(samples)
        q2 = next(q for q in result.queries if q.query_id == "q2")
        assert q2.response_count == 2
        assert q2.visibility == 25.0

    def test_query_with_only_competitor_data_has_no_aggregate(self):
        result = aggregate_samples([
            make_sample("q", "query", competitors={"Rival": CompetitorSample(visibility=50)}),
        ])
        assert result.queries == []
        assert result.competitors["q"]["Rival"].visibility == 50.0

    def test_first_appearance_order(self, samples):
        result = aggregate_samples(samples)
        assert [q.query_id for q in result.queries] == ["q1", "q2", "q3"]

    def test_skips_samples_without_query_text(self):
        result = aggregate_samples([
            MetricSample(query_id="q", query_text="  ", brand_visibility=10),
            MetricSample(query_id="", query_text="query", brand_visibility=10),
        ])
        assert result.is_empty

    def test_malformed_sample_skipped(self):
        result = aggregate_samples([
            make_sample("bad", "query", visibility="not a number"),
            make_sample("good", "query", visibility=10),
        ])
        assert [q.query_id for q in result.queries] == ["good"]


class TestCompetitorAggregation:

    def test_competitor_means(self):
        result = aggregate_samples([
            make_sample("q", "query", visibility=10, competitors={
                "Rival": CompetitorSample(visibility=0.4, share_of_answer=30),
            }),
            make_sample("q", "query", visibility=10, competitors={
                "Rival": CompetitorSample(visibility=60, share_of_answer=None),
            }),
        ])
        rival = result.competitors["q"]["Rival"]
        assert rival.visibility == 50.0
        assert rival.soa == 30.0
        assert rival.sentiment is None

    def test_idempotent(self, samples):
        assert aggregate_samples(samples) == aggregate_samples(samples)


class TestMetricsAggregator:

    def test_store_failure_degrades_to_empty(self, samples):
        store = FakeStore(samples=samples)
        store.metric_error = True

        result = MetricsAggregator(store).aggregate("brand-1", "cust-1", NOW, NOW)

        assert result.is_empty

    def test_collector_slugs_resolved(self, samples):
        store = FakeStore(samples=samples)

        result = MetricsAggregator(store).aggregate(
            "brand-1", "cust-1", NOW.replace(year=2024), NOW, collectors=["perplexity"],
        )

        assert store.sample_calls[0]["collector_types"] == ["Perplexity"]
        assert [q.query_id for q in result.queries] == ["q3"]

    def test_no_filter_passes_none(self, samples):
        store = FakeStore(samples=samples)
        MetricsAggregator(store).aggregate("brand-1", None, NOW, NOW)
        assert store.sample_calls[0]["collector_types"] is None
