"""
Opportunity Identification Engine

Finds queries where a brand underperforms in AI answer engines:

1. **Query Classifier** - category 1/2/3 from the names a query contains
2. **Metrics Aggregator** - per-query and per-competitor averages
3. **Opportunity Evaluator** - fixed threshold policy, severity, priority
4. **Opportunity Identifier** - orchestrates a full run for one brand

Example Usage:
    from aeo_engine.opportunity import OpportunityIdentifier
    from aeo_engine.database import SqlMetricsStore

    identifier = OpportunityIdentifier(SqlMetricsStore())
    response = identifier.identify_opportunities(brand_id, customer_id, days=14)
    for opp in response.opportunities:
        print(opp.id, opp.severity.value, opp.priority_score)
"""

from .helpers import (
    QueryCategory,
    MetricName,
    Severity,
    THRESHOLDS,
    METRIC_WEIGHTS,
    calculate_severity,
    calculate_priority_score,
    generate_opportunity_id,
    normalize_visibility,
    resolve_collector_types,
    extract_aliases,
)
from .classifier import QueryClassification, classify_query
from .aggregator import (
    QueryAggregate,
    CompetitorAggregate,
    MetricsAggregation,
    MetricsAggregator,
    aggregate_samples,
)
from .evaluator import Opportunity, evaluate_query, rank_opportunities, build_summary
from .identifier import OpportunityIdentifier, OpportunityResponse, aggregate_top_sources

__all__ = [
    "QueryCategory",
    "MetricName",
    "Severity",
    "THRESHOLDS",
    "METRIC_WEIGHTS",
    "calculate_severity",
    "calculate_priority_score",
    "generate_opportunity_id",
    "normalize_visibility",
    "resolve_collector_types",
    "extract_aliases",
    "QueryClassification",
    "classify_query",
    "QueryAggregate",
    "CompetitorAggregate",
    "MetricsAggregation",
    "MetricsAggregator",
    "aggregate_samples",
    "Opportunity",
    "evaluate_query",
    "rank_opportunities",
    "build_summary",
    "OpportunityIdentifier",
    "OpportunityResponse",
    "aggregate_top_sources",
]
