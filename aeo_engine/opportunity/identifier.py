"""
Opportunity Identifier

Orchestrates one identification run for a brand:

1. Load brand + competitors (missing brand is fatal)
2. Aggregate metrics over the lookback window
3. Classify each query and evaluate it against the threshold policy
4. Attach top citation sources (one batched citation lookup per run)
5. Rank and summarize
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from ..errors import BrandNotFoundError, DataFetchError
from ..models import CitationRecord, MetricsStore, TopSource
from ..utils.config import get_settings
from .aggregator import MetricsAggregator
from .classifier import classify_query
from .evaluator import Opportunity, build_summary, evaluate_query, rank_opportunities

logger = logging.getLogger(__name__)

# Citations considered per query before per-domain aggregation
CITATIONS_PER_QUERY = 10


@dataclass
class OpportunityResponse:
    """Ranked opportunities plus run metadata."""
    opportunities: List[Opportunity]
    summary: Dict[str, Any]
    start: datetime
    end: datetime
    total_analyzed_queries: int
    brand_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "opportunities": [o.to_dict() for o in self.opportunities],
            "summary": self.summary,
            "date_range": {
                "start": self.start.isoformat(),
                "end": self.end.isoformat(),
            },
            "total_analyzed_queries": self.total_analyzed_queries,
        }


def aggregate_top_sources(
    citations: Sequence[CitationRecord],
    limit: int = 3,
) -> Dict[str, List[TopSource]]:
    """
    Group citations by query and domain.

    Per query, only the CITATIONS_PER_QUERY most-used citations are
    considered. Missing domains count as "unknown" and missing usage
    counts as 1. Domains are ranked by summed usage; the first URL seen
    for a domain is kept.

    Args:
        citations: Citation records (any order)
        limit: Domains kept per query

    Returns:
        query_id -> top sources
    """
    per_query: "OrderedDict[str, List[CitationRecord]]" = OrderedDict()
    for citation in citations:
        if not citation.query_id:
            continue
        per_query.setdefault(str(citation.query_id), []).append(citation)

    result: Dict[str, List[TopSource]] = {}
    for query_id, records in per_query.items():
        records = sorted(records, key=lambda c: c.usage_count or 1, reverse=True)
        totals: "OrderedDict[str, TopSource]" = OrderedDict()
        for record in records[:CITATIONS_PER_QUERY]:
            domain = (record.domain or "").strip() or "unknown"
            source = totals.get(domain)
            if source is None:
                source = TopSource(domain=domain, url=record.url or "", impact_score=0)
                totals[domain] = source
            source.impact_score += record.usage_count or 1

        ranked = sorted(totals.values(), key=lambda s: s.impact_score, reverse=True)
        result[query_id] = ranked[:limit]

    return result


class OpportunityIdentifier:
    """
    Identifies ranked opportunities for a brand.

    Usage:
        identifier = OpportunityIdentifier(store)
        response = identifier.identify_opportunities(brand_id, customer_id)
    """

    def __init__(
        self,
        store: MetricsStore,
        aggregator: Optional[MetricsAggregator] = None,
        max_sources_per_query: Optional[int] = None,
    ):
        settings = get_settings()
        self.store = store
        self.aggregator = aggregator or MetricsAggregator(store)
        self.default_days = settings.DEFAULT_LOOKBACK_DAYS
        self.max_sources = max_sources_per_query or settings.MAX_SOURCES_PER_QUERY

    def identify_opportunities(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        days: Optional[int] = None,
        collectors: Optional[Sequence[str]] = None,
        topics: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> OpportunityResponse:
        """
        Run identification for one brand.

        Args:
            brand_id: Brand ID
            customer_id: Tenant scope
            days: Lookback window in days (default from settings)
            collectors: Optional collector filter slugs
            topics: Optional topic filter (case-insensitive)
            now: End of the window (defaults to utcnow)

        Returns:
            OpportunityResponse

        Raises:
            BrandNotFoundError: if the brand does not exist for the tenant
        """
        brand = self.store.get_brand(brand_id, customer_id)
        if brand is None:
            raise BrandNotFoundError(brand_id)

        competitors = self.store.get_competitors(brand_id, customer_id)
        competitor_names = [c.name for c in competitors]

        end = now or datetime.utcnow()
        start = end - timedelta(days=days or self.default_days)

        aggregation = self.aggregator.aggregate(brand_id, customer_id, start, end, collectors)

        queries = aggregation.queries
        wanted = {t.strip().lower() for t in topics or [] if t and t.strip()}
        if wanted:
            queries = [q for q in queries if (q.topic or "").strip().lower() in wanted]

        opportunities: List[Opportunity] = []
        for query in queries:
            classification = classify_query(
                query.query_text, brand.name, brand.aliases, competitor_names
            )
            opportunities.extend(evaluate_query(
                query, classification, aggregation.competitors.get(query.query_id, {})
            ))

        self._attach_top_sources(opportunities, customer_id)

        ranked = rank_opportunities(opportunities)
        logger.info(
            f"Brand {brand.name}: {len(ranked)} opportunities across {len(queries)} queries "
            f"({start.date()} to {end.date()})"
        )

        return OpportunityResponse(
            opportunities=ranked,
            summary=build_summary(ranked),
            start=start,
            end=end,
            total_analyzed_queries=len(queries),
            brand_name=brand.name,
        )

    def _attach_top_sources(self, opportunities: List[Opportunity], customer_id: Optional[str]) -> None:
        """Fetch citations once for all opportunity-bearing queries."""
        query_ids = list(OrderedDict.fromkeys(o.query_id for o in opportunities))
        if not query_ids:
            return

        try:
            citations = self.store.fetch_citations(query_ids, customer_id)
        except DataFetchError as e:
            logger.warning(f"Citation lookup failed, continuing without sources: {e}")
            return

        sources = aggregate_top_sources(citations, limit=self.max_sources)
        for opp in opportunities:
            opp.top_sources = list(sources.get(opp.query_id, []))
