"""
Recommendation Synthesis

Turns the highest-priority opportunities into drafted content
recommendations, with per-source interaction models resolved first so the
draft never proposes publishing where the brand has no control.
"""

from .domain_context import (
    ContributionModel,
    DomainRole,
    DomainClassification,
    QuerySourceContext,
    DomainContextResolver,
    classify_domain_by_policy,
    apply_guard_rails,
    domain_role,
)
from .synthesizer import (
    Recommendation,
    RecommendationSynthesizer,
    SynthesisResult,
    SynthesisStatus,
    QueryGroup,
    select_opportunities_for_top_queries,
    group_by_query,
    map_recommendations,
    normalize_content_type,
)

__all__ = [
    "ContributionModel",
    "DomainRole",
    "DomainClassification",
    "QuerySourceContext",
    "DomainContextResolver",
    "classify_domain_by_policy",
    "apply_guard_rails",
    "domain_role",
    "Recommendation",
    "RecommendationSynthesizer",
    "SynthesisResult",
    "SynthesisStatus",
    "QueryGroup",
    "select_opportunities_for_top_queries",
    "group_by_query",
    "map_recommendations",
    "normalize_content_type",
]
