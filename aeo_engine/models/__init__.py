"""
AEO Opportunity Engine - Data Models

Shared data models passed between the store boundary and the core.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from datetime import datetime

from ..utils.domain_filter import normalize_domain


@dataclass
class Brand:
    """Tracked brand. Read-only to the core."""
    id: str
    name: str
    customer_id: Optional[str] = None
    aliases: List[str] = field(default_factory=list)
    homepage_url: Optional[str] = None
    industry: Optional[str] = None

    @property
    def domain(self) -> Optional[str]:
        """Homepage reduced to a bare domain (no scheme, www or path)."""
        if not self.homepage_url:
            return None
        return normalize_domain(self.homepage_url) or None


@dataclass
class Competitor:
    """Competitor tracked for a brand."""
    id: str
    name: str
    domain: Optional[str] = None


@dataclass
class GeneratedQuery:
    """Query sent to the answer engines."""
    id: str
    text: str
    topic: Optional[str] = None


@dataclass
class CompetitorSample:
    """Competitor measurements inside one answer-engine response."""
    visibility: Optional[float] = None
    share_of_answer: Optional[float] = None
    sentiment: Optional[float] = None


@dataclass
class MetricSample:
    """
    One answer-engine response measured for a brand and its competitors.

    Visibility may arrive as a 0-1 fraction or as a percentage; it is
    normalized by the aggregator.
    """
    query_id: str
    query_text: Optional[str] = None
    topic: Optional[str] = None
    collector_type: Optional[str] = None
    processed_at: Optional[datetime] = None
    brand_visibility: Optional[float] = None
    brand_share_of_answer: Optional[float] = None
    brand_sentiment: Optional[float] = None
    competitors: Dict[str, CompetitorSample] = field(default_factory=dict)

    @property
    def has_brand_data(self) -> bool:
        return any(
            v is not None
            for v in (self.brand_visibility, self.brand_share_of_answer, self.brand_sentiment)
        )


@dataclass
class CitationRecord:
    """A source cited by an answer engine for a query."""
    query_id: str
    domain: Optional[str]
    url: Optional[str] = None
    usage_count: Optional[int] = None


@dataclass
class TopSource:
    """Citation domain aggregated for one query."""
    domain: str
    url: str = ""
    impact_score: int = 0


from .store import MetricsStore, RecommendationStore  # noqa: E402
