"""
Tests for a full opportunity identification run.
"""

from datetime import timedelta

import pytest

from aeo_engine.errors import BrandNotFoundError
from aeo_engine.models import CitationRecord
from aeo_engine.opportunity import OpportunityIdentifier, Severity, aggregate_top_sources

from conftest import NOW


@pytest.fixture
def identifier(store):
    return OpportunityIdentifier(store)


class TestIdentifyOpportunities:

    def test_ranked_opportunities(self, identifier):
        response = identifier.identify_opportunities("brand-1", "cust-1", now=NOW)

        assert [o.id for o in response.opportunities] == [
            "q3-visibility-rival",
            "q1-soa-rival",
            "q2-visibility",
        ]
        assert [o.category for o in response.opportunities] == [3, 1, 2]
        assert response.total_analyzed_queries == 3
        assert response.brand_name == "Acme"

    def test_summary(self, identifier):
        summary = identifier.identify_opportunities("brand-1", "cust-1", now=NOW).summary

        assert summary["total"] == 3
        assert summary["by_severity"]["critical"] == 2
        assert summary["by_severity"]["low"] == 1
        assert summary["by_category"] == {1: 1, 2: 1, 3: 1}

    def test_window(self, identifier, store):
        response = identifier.identify_opportunities("brand-1", "cust-1", days=7, now=NOW)

        assert response.end == NOW
        assert response.start == NOW - timedelta(days=7)
        assert store.sample_calls[0]["start"] == NOW - timedelta(days=7)

    def test_samples_outside_window_ignored(self, identifier):
        response = identifier.identify_opportunities("brand-1", "cust-1", now=NOW + timedelta(days=60))
        assert response.opportunities == []
        assert response.total_analyzed_queries == 0

    def test_topic_filter_case_insensitive(self, identifier):
        response = identifier.identify_opportunities("brand-1", "cust-1", topics=["startups"], now=NOW)
        assert [o.query_id for o in response.opportunities] == ["q3"]
        assert response.total_analyzed_queries == 1

    @pytest.mark.parametrize("topics", [["  "], ["", None], []])
    def test_blank_topic_filter_keeps_all_queries(self, identifier, topics):
        response = identifier.identify_opportunities("brand-1", "cust-1", topics=topics, now=NOW)
        assert response.total_analyzed_queries == 3
        assert len(response.opportunities) == 3

    def test_unknown_brand(self, identifier):
        with pytest.raises(BrandNotFoundError):
            identifier.identify_opportunities("missing", "cust-1", now=NOW)

    def test_wrong_tenant(self, identifier):
        with pytest.raises(BrandNotFoundError):
            identifier.identify_opportunities("brand-1", "other-customer", now=NOW)

    def test_metric_failure_gives_empty_response(self, identifier, store):
        store.metric_error = True
        response = identifier.identify_opportunities("brand-1", "cust-1", now=NOW)
        assert response.opportunities == []
        assert response.summary["total"] == 0

    def test_idempotent(self, identifier):
        first = identifier.identify_opportunities("brand-1", "cust-1", now=NOW).to_dict()
        second = identifier.identify_opportunities("brand-1", "cust-1", now=NOW).to_dict()
        assert first == second

    def test_to_dict_shape(self, identifier):
        data = identifier.identify_opportunities("brand-1", "cust-1", now=NOW).to_dict()
        assert set(data) == {"opportunities", "summary", "date_range", "total_analyzed_queries"}
        assert data["date_range"]["end"] == NOW.isoformat()
        assert data["opportunities"][0]["severity"] == Severity.CRITICAL.value


class TestTopSources:

    def test_sources_attached(self, identifier):
        response = identifier.identify_opportunities("brand-1", "cust-1", now=NOW)
        by_query = {o.query_id: o for o in response.opportunities}

        q3 = by_query["q3"].top_sources
        assert [(s.domain, s.impact_score) for s in q3] == [
            ("reddit.com", 6), ("rival.com", 3), ("youtube.com", 2),
        ]
        assert q3[0].url == "https://reddit.com/r/payroll/1"
        assert [s.domain for s in by_query["q1"].top_sources] == ["techcrunch.com"]
        assert by_query["q2"].top_sources == []

    def test_citations_fetched_once(self, identifier, store):
        identifier.identify_opportunities("brand-1", "cust-1", now=NOW)
        assert store.citation_calls == [["q1", "q2", "q3"]]

    def test_citation_failure_keeps_opportunities(self, identifier, store):
        store.citation_error = True
        response = identifier.identify_opportunities("brand-1", "cust-1", now=NOW)
        assert len(response.opportunities) == 3
        assert all(o.top_sources == [] for o in response.opportunities)

    def test_aggregate_limits_and_defaults(self):
        citations = [CitationRecord("q", f"site{i}.com", None, None) for i in range(12)]
        citations.append(CitationRecord("q", None, "https://x", 1))

        sources = aggregate_top_sources(citations, limit=3)["q"]

        assert len(sources) == 3
        assert all(s.impact_score == 1 for s in sources)
        assert sources[0].url == ""

    def test_only_top_ten_citations_per_query(self):
        citations = [CitationRecord("q", "big.com", None, 100)]
        citations += [CitationRecord("q", "small.com", None, 2) for _ in range(9)]
        citations += [CitationRecord("q", "tail.com", None, 1) for _ in range(5)]

        sources = aggregate_top_sources(citations, limit=3)["q"]

        assert [s.domain for s in sources] == ["big.com", "small.com"]
        assert sources[1].impact_score == 18
