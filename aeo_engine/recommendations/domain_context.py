"""
Source/Domain Context Resolver

Determines, per (query, domain) pair, how the brand can realistically get
content onto a cited source:

- direct_publish: brand's own site or its own channel on an open video platform
- community: brand participates as a member (Reddit, Quora, forums, social)
- earned_media: coverage must be pitched, or the site can only be monitored
- paid_placement: sponsored placement (only ever proposed by the model)

A generative pass tailors content types to the query; fixed policy guard
rails then override anything that would grant unearned publishing rights.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..analyzer.client import GenerativeTextClient
from ..utils.config import get_settings
from ..utils.domain_filter import (
    is_brand_domain,
    is_community_domain,
    is_competitor_domain,
    is_editorial_domain,
    is_video_platform,
    normalize_domain,
)
from .prompts import build_domain_analysis_prompt, domain_analysis_system

logger = logging.getLogger(__name__)


class ContributionModel(str, Enum):
    DIRECT_PUBLISH = "direct_publish"
    EARNED_MEDIA = "earned_media"
    PAID_PLACEMENT = "paid_placement"
    COMMUNITY = "community"


class DomainRole(str, Enum):
    """Policy role of a domain relative to the brand."""
    BRAND = "brand"
    COMPETITOR = "competitor"
    VIDEO = "video"
    COMMUNITY = "community"
    EDITORIAL = "editorial"
    THIRD_PARTY = "third_party"


@dataclass
class QuerySourceContext:
    """One query plus the citation domains to analyze for it."""
    query_id: str
    query_text: str
    domains: List[str] = field(default_factory=list)


@dataclass
class DomainClassification:
    """Interaction model for one domain under one query."""
    domain: str
    query_id: str
    best_content_types: List[str] = field(default_factory=list)
    contribution_model: ContributionModel = ContributionModel.EARNED_MEDIA
    recommended_action_verb: str = "Monitor/Counter"
    rationale: str = ""

    def format_context(self) -> str:
        """
        One-line summary used inside recommendation prompts.

        "reddit.com | Best Fits: [Expert Answer] | Interaction: Post (community) | Context: ..."
        """
        context = self.domain
        if self.best_content_types:
            context += f" | Best Fits: [{', '.join(self.best_content_types)}]"
        if self.recommended_action_verb:
            context += f" | Interaction: {self.recommended_action_verb} ({self.contribution_model.value})"
        if self.rationale:
            context += f" | Context: {self.rationale}"
        return context


# =============================================================================
# POLICY
# =============================================================================

POLICY_DEFAULTS: Dict[DomainRole, Dict[str, Any]] = {
    DomainRole.BRAND: {
        "model": ContributionModel.DIRECT_PUBLISH,
        "verb": "Publish",
        "content_types": ["Article", "Technical Comparison Table", "Data-Driven White Paper"],
        "rationale": "Brand-owned site - full editorial control",
    },
    DomainRole.COMPETITOR: {
        "model": ContributionModel.DIRECT_PUBLISH,
        "verb": "Monitor/Counter",
        "content_types": [],
        "rationale": "Competitor content should be monitored",
    },
    DomainRole.VIDEO: {
        "model": ContributionModel.DIRECT_PUBLISH,
        "verb": "Publish",
        "content_types": ["Short-form Video", "Tutorial", "Product Demo"],
        "rationale": "Open video platform - brand can publish on its own channel",
    },
    DomainRole.COMMUNITY: {
        "model": ContributionModel.COMMUNITY,
        "verb": "Post",
        "content_types": ["Discussion thread", "Expert Answer", "Community Response", "AMA"],
        "rationale": "Community platform - participate as a member, not as an advertiser",
    },
    DomainRole.EDITORIAL: {
        "model": ContributionModel.EARNED_MEDIA,
        "verb": "Pitch",
        "content_types": ["Article", "Feature", "Guest Post", "Expert Quote"],
        "rationale": "Editorial site - coverage has to be pitched, not published",
    },
    DomainRole.THIRD_PARTY: {
        "model": ContributionModel.EARNED_MEDIA,
        "verb": "Monitor/Counter",
        "content_types": [],
        "rationale": "Third-party commercial site - can only monitor or seek partnerships",
    },
}

# Roles whose classification is fixed regardless of query context
LOCKED_ROLES = {DomainRole.BRAND, DomainRole.COMPETITOR, DomainRole.THIRD_PARTY}


def domain_role(
    domain: str,
    brand_domain: Optional[str],
    competitor_domains: Sequence[str],
) -> DomainRole:
    """
    Determine the policy role of a domain. Checked in order: brand,
    competitor, video platform, community, editorial, third party.
    """
    if is_brand_domain(domain, brand_domain):
        return DomainRole.BRAND
    if is_competitor_domain(domain, competitor_domains):
        return DomainRole.COMPETITOR
    if is_video_platform(domain):
        return DomainRole.VIDEO
    if is_community_domain(domain):
        return DomainRole.COMMUNITY
    if is_editorial_domain(domain):
        return DomainRole.EDITORIAL
    return DomainRole.THIRD_PARTY


def classify_domain_by_policy(
    domain: str,
    query_id: str,
    brand_domain: Optional[str],
    competitor_domains: Sequence[str],
) -> DomainClassification:
    """Classify a domain from fixed policy alone (no model involved)."""
    defaults = POLICY_DEFAULTS[domain_role(domain, brand_domain, competitor_domains)]
    return DomainClassification(
        domain=domain,
        query_id=query_id,
        best_content_types=list(defaults["content_types"]),
        contribution_model=defaults["model"],
        recommended_action_verb=defaults["verb"],
        rationale=defaults["rationale"],
    )


def apply_guard_rails(
    candidate: DomainClassification,
    brand_domain: Optional[str],
    competitor_domains: Sequence[str],
) -> DomainClassification:
    """
    Reconcile a model classification with policy.

    Brand, competitor and plain third-party domains always take the policy
    classification. Elsewhere the model's content types and rationale are
    kept, but the contribution model and verb come from policy, so a model
    can never grant "Publish" on a domain the brand does not control.
    """
    role = domain_role(candidate.domain, brand_domain, competitor_domains)
    policy = classify_domain_by_policy(candidate.domain, candidate.query_id, brand_domain, competitor_domains)

    if role in LOCKED_ROLES:
        if role == DomainRole.BRAND and candidate.best_content_types:
            policy.best_content_types = list(candidate.best_content_types)
        return policy

    if candidate.contribution_model != policy.contribution_model:
        logger.debug(
            f"Overriding {candidate.contribution_model.value} -> {policy.contribution_model.value} "
            f"for {candidate.domain}"
        )

    return DomainClassification(
        domain=candidate.domain,
        query_id=candidate.query_id,
        best_content_types=list(candidate.best_content_types) or policy.best_content_types,
        contribution_model=policy.contribution_model,
        recommended_action_verb=policy.recommended_action_verb,
        rationale=candidate.rationale or policy.rationale,
    )


def _parse_item(item: Dict[str, Any]) -> Optional[DomainClassification]:
    """Convert one model item; None if required fields are missing or invalid."""
    query_id = item.get("queryId")
    domain = normalize_domain(item.get("domain"))
    if not query_id or not domain:
        return None

    try:
        model = ContributionModel(str(item.get("contributionModel", "")).strip())
    except ValueError:
        return None

    content_types = item.get("bestContentTypes") or []
    if not isinstance(content_types, list):
        return None

    return DomainClassification(
        domain=domain,
        query_id=str(query_id),
        best_content_types=[str(c) for c in content_types if c],
        contribution_model=model,
        recommended_action_verb=str(item.get("recommendedActionVerb") or ""),
        rationale=str(item.get("whyThisFit") or ""),
    )


DomainClassificationMap = Dict[str, Dict[str, DomainClassification]]


class DomainContextResolver:
    """
    Resolves domain classifications for a batch of query contexts.

    Usage:
        resolver = DomainContextResolver(llm=ClaudeClient())
        classifications = await resolver.resolve(contexts, "acme.com", ["rival.com"], "Acme")
        classifications["q1"]["reddit.com"].recommended_action_verb  # "Post"
    """

    def __init__(
        self,
        llm: Optional[GenerativeTextClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.llm = llm
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS
        self.max_tokens = settings.LLM_MAX_TOKENS

    async def resolve(
        self,
        contexts: Sequence[QuerySourceContext],
        brand_domain: Optional[str],
        competitor_domains: Sequence[str],
        brand_name: str,
    ) -> DomainClassificationMap:
        """
        Classify every (query, domain) pair in one batch.

        Args:
            contexts: Query contexts with their candidate domains
            brand_domain: Brand's homepage domain
            competitor_domains: Normalized competitor domains
            brand_name: Brand display name (prompt only)

        Returns:
            query_id -> domain -> DomainClassification; empty on failure
        """
        try:
            return await self._resolve(contexts, brand_domain, competitor_domains, brand_name)
        except Exception as e:
            logger.error(f"Domain context resolution failed: {e}")
            return {}

    async def _resolve(
        self,
        contexts: Sequence[QuerySourceContext],
        brand_domain: Optional[str],
        competitor_domains: Sequence[str],
        brand_name: str,
    ) -> DomainClassificationMap:
        result: DomainClassificationMap = {}
        pending = [c for c in contexts if c.domains]
        if not pending:
            return result

        wanted = {
            c.query_id: {normalize_domain(d) for d in c.domains if normalize_domain(d)}
            for c in pending
        }

        if self.llm is not None:
            prompt = build_domain_analysis_prompt(pending, brand_domain, competitor_domains, brand_name)
            items = await asyncio.wait_for(
                self.llm.generate_json_array(
                    prompt,
                    system=domain_analysis_system(brand_name),
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )

            dropped = 0
            for item in items:
                candidate = _parse_item(item) if isinstance(item, dict) else None
                if candidate is None or candidate.domain not in wanted.get(candidate.query_id, set()):
                    dropped += 1
                    continue
                result.setdefault(candidate.query_id, {})[candidate.domain] = apply_guard_rails(
                    candidate, brand_domain, competitor_domains
                )

            if dropped:
                logger.warning(f"Dropped {dropped} malformed domain classifications")

        # Policy fills whatever the model did not cover
        for query_id, domains in wanted.items():
            per_query = result.setdefault(query_id, {})
            for domain in sorted(domains):
                if domain not in per_query:
                    per_query[domain] = classify_domain_by_policy(
                        domain, query_id, brand_domain, competitor_domains
                    )

        logger.info(
            f"Resolved {sum(len(v) for v in result.values())} domain classifications "
            f"for {len(result)} queries"
        )
        return result
