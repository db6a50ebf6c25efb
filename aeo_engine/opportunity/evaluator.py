"""
Opportunity Evaluator

Applies the category threshold policy to one query's aggregates:

- Category 1: brand vs. each named competitor (relative) plus brand vs.
  floor (absolute). Absolute is suppressed when a relative opportunity
  exists for the same query + metric.
- Category 2: brand vs. floor only.
- Category 3: brand vs. every tracked competitor (relative).

Triggers are strict: competitor - brand > threshold, brand < floor.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..models import TopSource
from .aggregator import CompetitorAggregate, QueryAggregate
from .classifier import QueryClassification
from .helpers import (
    METRIC_ORDER,
    THRESHOLDS,
    MetricName,
    QueryCategory,
    Severity,
    calculate_priority_score,
    calculate_severity,
    generate_opportunity_id,
    round_one,
)

logger = logging.getLogger(__name__)


@dataclass
class Opportunity:
    """A thresholded performance gap on one metric for one query."""
    id: str
    query_id: str
    query_text: str
    category: QueryCategory
    metric: MetricName
    brand_value: float
    target_value: float
    gap: float
    severity: Severity
    priority_score: float
    competitor: Optional[str] = None
    top_sources: List[TopSource] = field(default_factory=list)
    response_count: int = 0
    topic: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with enum values flattened for JSON output."""
        data = asdict(self)
        data["category"] = int(self.category)
        data["metric"] = self.metric.value
        data["severity"] = self.severity.value
        return data


def _find_competitor(
    name: str,
    competitor_aggregates: Mapping[str, CompetitorAggregate],
) -> Optional[CompetitorAggregate]:
    """Case-insensitive lookup of a competitor aggregate."""
    if name in competitor_aggregates:
        return competitor_aggregates[name]
    lowered = name.strip().lower()
    for key, aggregate in competitor_aggregates.items():
        if key.strip().lower() == lowered:
            return aggregate
    return None


def _build(
    query: QueryAggregate,
    category: QueryCategory,
    metric: MetricName,
    brand_value: float,
    target_value: float,
    competitor: Optional[str] = None,
) -> Opportunity:
    gap = target_value - brand_value
    return Opportunity(
        id=generate_opportunity_id(query.query_id, metric, competitor),
        query_id=query.query_id,
        query_text=query.query_text,
        category=category,
        metric=metric,
        brand_value=round_one(brand_value),
        target_value=round_one(target_value),
        gap=round_one(gap),
        severity=calculate_severity(gap),
        priority_score=calculate_priority_score(gap, metric),
        competitor=competitor,
        response_count=query.response_count,
        topic=query.topic,
    )


def _relative(
    query: QueryAggregate,
    category: QueryCategory,
    competitors: Sequence[str],
    competitor_aggregates: Mapping[str, CompetitorAggregate],
) -> List[Opportunity]:
    thresholds = THRESHOLDS[category]["relative"]
    results = []

    for metric in METRIC_ORDER:
        brand_value = query.value(metric.value)
        if brand_value is None:
            continue
        for name in competitors:
            aggregate = _find_competitor(name, competitor_aggregates)
            if aggregate is None:
                continue
            competitor_value = aggregate.value(metric.value)
            if competitor_value is None:
                continue
            if competitor_value - brand_value > thresholds[metric]:
                results.append(_build(
                    query, category, metric, brand_value, competitor_value,
                    competitor=aggregate.competitor_name,
                ))

    return results


def _absolute(
    query: QueryAggregate,
    category: QueryCategory,
    skip: Set[Tuple[str, MetricName]],
) -> List[Opportunity]:
    floors = THRESHOLDS[category]["absolute"]
    results = []

    for metric in METRIC_ORDER:
        brand_value = query.value(metric.value)
        if brand_value is None:
            continue
        if (query.query_id, metric) in skip:
            continue
        floor = floors[metric]
        if brand_value < floor:
            results.append(_build(query, category, metric, brand_value, floor))

    return results


def evaluate_query(
    query: QueryAggregate,
    classification: QueryClassification,
    competitor_aggregates: Optional[Mapping[str, CompetitorAggregate]] = None,
) -> List[Opportunity]:
    """
    Evaluate one query against the threshold policy.

    Args:
        query: Brand aggregate for the query
        classification: Category and comparison competitors
        competitor_aggregates: Competitor name -> aggregate for this query

    Returns:
        Opportunities in evaluation order (not yet ranked)
    """
    competitor_aggregates = competitor_aggregates or {}
    category = classification.category

    if category == QueryCategory.BRAND_AND_COMPETITOR:
        relative = _relative(query, category, classification.competitors_in_query, competitor_aggregates)
        covered = {(o.query_id, o.metric) for o in relative}
        return relative + _absolute(query, category, covered)

    if category == QueryCategory.BRAND_ONLY:
        return _absolute(query, category, set())

    return _relative(query, category, classification.competitors_in_query, competitor_aggregates)


def rank_opportunities(opportunities: List[Opportunity]) -> List[Opportunity]:
    """
    Sort by priority score, highest first.

    The sort is stable, so ties keep evaluation order and repeated runs
    over identical inputs return identical lists.
    """
    return sorted(opportunities, key=lambda o: o.priority_score, reverse=True)


def build_summary(opportunities: List[Opportunity]) -> Dict[str, Any]:
    """
    Count opportunities by severity, category and metric.

    Returns:
        {"total", "by_severity", "by_category", "by_metric"}
    """
    by_severity = {s.value.lower(): 0 for s in Severity}
    by_category = {int(c): 0 for c in QueryCategory}
    by_metric = {m.value: 0 for m in MetricName}

    for opp in opportunities:
        by_severity[opp.severity.value.lower()] += 1
        by_category[int(opp.category)] += 1
        by_metric[opp.metric.value] += 1

    return {
        "total": len(opportunities),
        "by_severity": by_severity,
        "by_category": by_category,
        "by_metric": by_metric,
    }
