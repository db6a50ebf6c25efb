"""
Metrics Aggregator

Turns raw per-response metric samples into per-query brand averages and
per-query, per-competitor averages over a lookback window.

Rules:
- Visibility is normalized to 0-100 (raw > 1 is already percent)
- All metrics are clamped to [0, 100]
- Means are taken over non-null samples only; no samples -> None
- Samples without brand data do not count toward response_count
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from ..errors import DataFetchError
from ..models import MetricSample, MetricsStore
from .helpers import clamp_metric, normalize_visibility, resolve_collector_types

logger = logging.getLogger(__name__)


@dataclass
class QueryAggregate:
    """Brand averages for one query."""
    query_id: str
    query_text: str
    topic: Optional[str] = None
    visibility: Optional[float] = None
    soa: Optional[float] = None
    sentiment: Optional[float] = None
    response_count: int = 0

    def value(self, metric: str) -> Optional[float]:
        return getattr(self, metric)


@dataclass
class CompetitorAggregate:
    """Competitor averages for one query."""
    query_id: str
    competitor_name: str
    visibility: Optional[float] = None
    soa: Optional[float] = None
    sentiment: Optional[float] = None

    def value(self, metric: str) -> Optional[float]:
        return getattr(self, metric)


@dataclass
class MetricsAggregation:
    """Result of one aggregation run."""
    queries: List[QueryAggregate] = field(default_factory=list)
    competitors: Dict[str, Dict[str, CompetitorAggregate]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.queries and not self.competitors


class _Accumulator:
    """Running sums for the three metrics."""

    __slots__ = ("sums", "counts")

    def __init__(self):
        self.sums = {"visibility": 0.0, "soa": 0.0, "sentiment": 0.0}
        self.counts = {"visibility": 0, "soa": 0, "sentiment": 0}

    def add(self, metric: str, value: Optional[float]) -> None:
        if value is None:
            return
        self.sums[metric] += value
        self.counts[metric] += 1

    def mean(self, metric: str) -> Optional[float]:
        if not self.counts[metric]:
            return None
        return self.sums[metric] / self.counts[metric]


def _normalized(visibility, soa, sentiment):
    return (
        clamp_metric(normalize_visibility(visibility)),
        clamp_metric(soa),
        clamp_metric(sentiment),
    )


def aggregate_samples(samples: Iterable[MetricSample]) -> MetricsAggregation:
    """
    Aggregate metric samples. Pure function.

    Query order in the result follows first appearance in the input, and
    competitor order within a query follows first appearance as well, so
    identical inputs always produce identical outputs.

    Args:
        samples: Samples for one brand/tenant/window

    Returns:
        MetricsAggregation
    """
    query_info: "OrderedDict[str, Dict]" = OrderedDict()
    brand_acc: Dict[str, _Accumulator] = {}
    brand_counts: Dict[str, int] = {}
    competitor_acc: "OrderedDict[str, OrderedDict[str, _Accumulator]]" = OrderedDict()

    skipped = 0
    for sample in samples:
        try:
            if not sample.query_id or not (sample.query_text or "").strip():
                skipped += 1
                continue

            query_id = str(sample.query_id)
            if query_id not in query_info:
                query_info[query_id] = {"text": sample.query_text, "topic": sample.topic}

            if sample.has_brand_data:
                vis, soa, sent = _normalized(
                    sample.brand_visibility,
                    sample.brand_share_of_answer,
                    sample.brand_sentiment,
                )
                acc = brand_acc.setdefault(query_id, _Accumulator())
                acc.add("visibility", vis)
                acc.add("soa", soa)
                acc.add("sentiment", sent)
                brand_counts[query_id] = brand_counts.get(query_id, 0) + 1

            for name, comp in (sample.competitors or {}).items():
                if not name or comp is None:
                    continue
                vis, soa, sent = _normalized(comp.visibility, comp.share_of_answer, comp.sentiment)
                per_query = competitor_acc.setdefault(query_id, OrderedDict())
                acc = per_query.setdefault(name, _Accumulator())
                acc.add("visibility", vis)
                acc.add("soa", soa)
                acc.add("sentiment", sent)

        except (TypeError, ValueError, AttributeError) as e:
            skipped += 1
            logger.warning(f"Skipping malformed metric sample: {e}")

    if skipped:
        logger.debug(f"Aggregation skipped {skipped} samples")

    queries = []
    for query_id, info in query_info.items():
        acc = brand_acc.get(query_id)
        if acc is None:
            continue
        queries.append(QueryAggregate(
            query_id=query_id,
            query_text=info["text"],
            topic=info["topic"],
            visibility=acc.mean("visibility"),
            soa=acc.mean("soa"),
            sentiment=acc.mean("sentiment"),
            response_count=brand_counts.get(query_id, 0),
        ))

    competitors: Dict[str, Dict[str, CompetitorAggregate]] = {}
    for query_id, per_query in competitor_acc.items():
        competitors[query_id] = {
            name: CompetitorAggregate(
                query_id=query_id,
                competitor_name=name,
                visibility=acc.mean("visibility"),
                soa=acc.mean("soa"),
                sentiment=acc.mean("sentiment"),
            )
            for name, acc in per_query.items()
        }

    return MetricsAggregation(queries=queries, competitors=competitors)


class MetricsAggregator:
    """
    Reads samples from a MetricsStore and aggregates them.

    Store failures are logged and degrade to an empty aggregation so a
    single tenant's bad data never blocks other runs.
    """

    def __init__(self, store: MetricsStore):
        self.store = store

    def aggregate(
        self,
        brand_id: str,
        customer_id: Optional[str],
        start: datetime,
        end: datetime,
        collectors: Optional[Sequence[str]] = None,
    ) -> MetricsAggregation:
        """
        Aggregate metrics for a brand over [start, end].

        Args:
            brand_id: Brand ID
            customer_id: Tenant scope
            start: Window start
            end: Window end
            collectors: Optional collector filter slugs (e.g. "chatgpt")

        Returns:
            MetricsAggregation (empty on store failure)
        """
        collector_types = resolve_collector_types(collectors)

        try:
            samples = self.store.fetch_metric_samples(
                brand_id, customer_id, start, end, collector_types
            )
        except DataFetchError as e:
            logger.error(f"Metric fetch failed for brand {brand_id}: {e}")
            return MetricsAggregation()

        aggregation = aggregate_samples(samples)
        logger.info(
            f"Aggregated {len(samples)} samples into {len(aggregation.queries)} queries "
            f"for brand {brand_id}"
        )
        return aggregation
