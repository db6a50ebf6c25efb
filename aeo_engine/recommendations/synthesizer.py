"""
Recommendation Synthesizer

Converts identified opportunities into one content recommendation per
query:

1. Identify opportunities for the brand
2. Keep every opportunity for the top N distinct queries (priority order)
3. Build one source context per query and resolve domain context
4. One batched generative call
5. Map items to Recommendation and persist the batch atomically

A failed or empty generative call is terminal: nothing is persisted.
"""

import asyncio
import json
import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..analyzer.client import GenerativeTextClient
from ..errors import AEOEngineError, BrandNotFoundError, GenerativeTextError
from ..models import MetricsStore, RecommendationStore
from ..opportunity.evaluator import Opportunity
from ..opportunity.helpers import MetricName, Severity
from ..opportunity.identifier import OpportunityIdentifier
from ..utils.config import get_settings
from ..utils.domain_filter import build_competitor_domains, normalize_domain
from .domain_context import DomainContextResolver, QuerySourceContext
from .prompts import build_recommendation_prompt, recommendation_system

logger = logging.getLogger(__name__)


PIPELINE_SOURCE = "opportunity_to_rec_pipeline"

VALID_EFFORT = ("Low", "Medium", "High")

PRIORITY_BY_SEVERITY = {
    Severity.CRITICAL: "High",
    Severity.HIGH: "High",
    Severity.MEDIUM: "Medium",
    Severity.LOW: "Low",
}


class SynthesisStatus:
    COMPLETED = "completed"
    NO_OPPORTUNITIES = "no_opportunities"
    GENERATION_FAILED = "generation_failed"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass
class Recommendation:
    """One drafted recommendation for one query."""
    query_id: str
    action: str
    channel: str
    content_type: str
    asset_type: str
    rationale: str = ""
    content_title: str = ""
    timeline: str = ""
    effort: str = "Medium"
    expected_boost: str = ""
    confidence: Optional[int] = None
    amplification_advice: str = ""
    target_competitors: List[str] = field(default_factory=list)
    focus_area: str = MetricName.VISIBILITY.value
    kpi: str = MetricName.VISIBILITY.value
    priority: str = "Low"
    display_order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SynthesisResult:
    """Outcome of one conversion run."""
    success: bool
    status: str
    message: str
    generation_id: Optional[str] = None
    recommendations: List[Recommendation] = field(default_factory=list)
    opportunity_count: int = 0
    missing_query_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status,
            "message": self.message,
            "generation_id": self.generation_id,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "opportunity_count": self.opportunity_count,
            "missing_query_ids": list(self.missing_query_ids),
        }


@dataclass
class QueryGroup:
    """All selected opportunities for one query, merged for prompting."""
    query_id: str
    query_text: str
    topic: Optional[str]
    top_opportunity: Opportunity
    metrics: List[str] = field(default_factory=list)
    competitors: List[str] = field(default_factory=list)
    domains: List[str] = field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================

def select_opportunities_for_top_queries(
    opportunities: Sequence[Opportunity],
    max_queries: int,
) -> List[Opportunity]:
    """
    Keep all opportunities belonging to the first N distinct queries.

    Args:
        opportunities: Ranked opportunities
        max_queries: Distinct queries to keep

    Returns:
        Filtered opportunities, original order preserved
    """
    selected: List[str] = []
    for opp in opportunities:
        if len(selected) >= max_queries:
            break
        if opp.query_id not in selected:
            selected.append(opp.query_id)

    keep = set(selected)
    return [o for o in opportunities if o.query_id in keep]


def group_by_query(opportunities: Sequence[Opportunity]) -> List[QueryGroup]:
    """Merge opportunities per query; the first one seen is the query's top opportunity."""
    groups: "OrderedDict[str, QueryGroup]" = OrderedDict()
    for opp in opportunities:
        group = groups.get(opp.query_id)
        if group is None:
            group = QueryGroup(
                query_id=opp.query_id,
                query_text=opp.query_text,
                topic=opp.topic,
                top_opportunity=opp,
                domains=[s.domain for s in opp.top_sources if s.domain and s.domain != "unknown"],
            )
            groups[opp.query_id] = group
        if opp.metric.value not in group.metrics:
            group.metrics.append(opp.metric.value)
        if opp.competitor and opp.competitor not in group.competitors:
            group.competitors.append(opp.competitor)
    return list(groups.values())


def normalize_content_type(raw_type: Optional[str]) -> str:
    """Map a free-form content type to a stored asset type."""
    t = (raw_type or "").lower()
    if "video" in t:
        return "video"
    if "comparison" in t:
        return "comparison"
    if "expert community" in t or "reddit" in t or "forum" in t:
        return "expert_community_response"
    if "white paper" in t or "guide" in t or "tutorial" in t:
        return "guide"
    return "article"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return json.dumps(value, sort_keys=True)


def _confidence(value: Any) -> Optional[int]:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return None


def _effort(value: Any) -> str:
    effort = _text(value).capitalize()
    return effort if effort in VALID_EFFORT else "Medium"


def map_recommendations(
    items: Sequence[Dict[str, Any]],
    groups: Sequence[QueryGroup],
) -> List[Recommendation]:
    """
    Map model items onto Recommendation, one per known query.

    Items with an unknown or repeated queryId are dropped.
    """
    by_id = {g.query_id: g for g in groups}
    seen = set()
    recommendations: List[Recommendation] = []

    for item in items:
        query_id = _text(item.get("queryId"))
        group = by_id.get(query_id)
        if group is None:
            logger.warning(f"Dropping recommendation for unknown query id: {query_id!r}")
            continue
        if query_id in seen:
            logger.warning(f"Dropping repeated recommendation for query {query_id!r}")
            continue
        seen.add(query_id)

        content_type = _text(item.get("ContentType")) or "Article"
        metric = group.top_opportunity.metric.value

        recommendations.append(Recommendation(
            query_id=query_id,
            action=f"[{content_type}] {_text(item.get('Recommendation'))}",
            channel=_text(item.get("Channel")),
            content_type=content_type,
            asset_type=normalize_content_type(content_type),
            rationale=_text(item.get("ThoughtProcess")),
            content_title=_text(item.get("ContentTitle")),
            timeline=_text(item.get("Timeline")),
            effort=_effort(item.get("Effort")),
            expected_boost=_text(item.get("ExpectedBoost")),
            confidence=_confidence(item.get("Confidence")),
            amplification_advice=_text(item.get("Amplification")),
            target_competitors=list(group.competitors),
            focus_area=metric,
            kpi=metric,
            priority=PRIORITY_BY_SEVERITY[group.top_opportunity.severity],
            display_order=len(recommendations),
        ))

    return recommendations


# =============================================================================
# SYNTHESIZER
# =============================================================================

class RecommendationSynthesizer:
    """
    Orchestrates opportunity -> recommendation conversion for one brand.

    Usage:
        store = SqlMetricsStore()
        synthesizer = RecommendationSynthesizer(
            identifier=OpportunityIdentifier(store),
            llm=ClaudeClient(),
            store=store,
        )
        result = await synthesizer.convert_to_recommendations(brand_id, customer_id)
    """

    def __init__(
        self,
        identifier: OpportunityIdentifier,
        llm: Optional[GenerativeTextClient],
        store: Any,
        resolver: Optional[DomainContextResolver] = None,
        max_queries: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.identifier = identifier
        self.llm = llm
        self.store = store
        self.resolver = resolver or DomainContextResolver(llm=llm)
        self.max_queries = max_queries or settings.MAX_RECOMMENDATION_QUERIES
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS
        self.max_tokens = settings.LLM_MAX_TOKENS

    async def convert_to_recommendations(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Run the full conversion.

        Args:
            brand_id: Brand ID
            customer_id: Tenant scope

        Returns:
            SynthesisResult; "no_opportunities" and "generation_failed" are
            distinct outcomes

        Raises:
            BrandNotFoundError: if the brand does not exist
        """
        metrics_store: MetricsStore = self.store
        brand = metrics_store.get_brand(brand_id, customer_id)
        if brand is None:
            raise BrandNotFoundError(brand_id)

        competitors = metrics_store.get_competitors(brand_id, customer_id)
        brand_domain = brand.domain
        competitor_domains = build_competitor_domains([c.domain for c in competitors], brand_domain)

        response = self.identifier.identify_opportunities(brand_id, customer_id)
        opportunities = response.opportunities

        if not opportunities:
            logger.info(f"No opportunities for brand {brand.name}")
            return SynthesisResult(
                success=True,
                status=SynthesisStatus.NO_OPPORTUNITIES,
                message="No opportunities identified.",
            )

        unique_queries = len({o.query_id for o in opportunities})
        target = min(self.max_queries, unique_queries)
        selected = select_opportunities_for_top_queries(opportunities, target)
        groups = group_by_query(selected)
        logger.info(
            f"Selected {len(selected)} opportunities covering {len(groups)} queries "
            f"from {len(opportunities)} total ({unique_queries} unique queries)"
        )

        if self.llm is None:
            return self._failed("Generative text service not configured.", len(selected))

        contexts = [QuerySourceContext(g.query_id, g.query_text, list(g.domains)) for g in groups]
        classifications = await self.resolver.resolve(contexts, brand_domain, competitor_domains, brand.name)

        source_context: Dict[str, List[str]] = {}
        for group in groups:
            per_query = classifications.get(group.query_id, {})
            lines = []
            for domain in group.domains:
                classification = per_query.get(normalize_domain(domain))
                lines.append(classification.format_context() if classification else domain)
            source_context[group.query_id] = lines

        prompt = build_recommendation_prompt(
            brand.name, groups, source_context, competitor_domains, brand_domain
        )

        try:
            items = await asyncio.wait_for(
                self.llm.generate_json_array(
                    prompt,
                    system=recommendation_system(brand.name),
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Recommendation generation timed out after {self.timeout_seconds}s")
            return self._failed("LLM generation failed (timeout).", len(selected))
        except GenerativeTextError as e:
            logger.error(f"Recommendation generation failed: {e}")
            return self._failed("LLM generation failed.", len(selected))

        recommendations = map_recommendations(items or [], groups)
        if not recommendations:
            logger.error("LLM returned no usable recommendations")
            return self._failed("LLM generation failed (empty response).", len(selected))

        covered = {r.query_id for r in recommendations}
        missing = [g.query_id for g in groups if g.query_id not in covered]
        if missing:
            logger.warning(
                f"LLM returned no recommendation for {len(missing)} of {len(groups)} "
                f"selected queries: {', '.join(missing)}"
            )

        metadata: Dict[str, Any] = {"source": PIPELINE_SOURCE, "count": len(recommendations)}
        if missing:
            metadata["missing_query_ids"] = missing

        recommendation_store: RecommendationStore = self.store
        try:
            generation_id = recommendation_store.save_recommendation_batch(
                brand_id,
                customer_id,
                recommendations,
                metadata=metadata,
            )
        except AEOEngineError as e:
            logger.error(f"Failed to persist recommendations: {e}")
            return SynthesisResult(
                success=False,
                status=SynthesisStatus.PERSISTENCE_FAILED,
                message="Failed to save recommendations.",
                opportunity_count=len(selected),
            )

        logger.info(f"Saved {len(recommendations)} recommendations (generation {generation_id})")
        return SynthesisResult(
            success=True,
            status=SynthesisStatus.COMPLETED,
            message=f"Generated {len(recommendations)} recommendations from {len(selected)} opportunities.",
            generation_id=generation_id,
            recommendations=recommendations,
            opportunity_count=len(selected),
            missing_query_ids=missing,
        )

    @staticmethod
    def _failed(message: str, opportunity_count: int) -> SynthesisResult:
        return SynthesisResult(
            success=False,
            status=SynthesisStatus.GENERATION_FAILED,
            message=message,
            opportunity_count=opportunity_count,
        )
