"""
Prompt Builders

Builds the two batched prompts used during recommendation synthesis:
1. Domain analysis (one JSON object per query + domain)
2. Recommendation drafting (one JSON object per query)
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .domain_context import QuerySourceContext
    from .synthesizer import QueryGroup


CONTENT_TYPE_OPTIONS = [
    ("Short-form Video Script", "fast answers and visual walkthroughs"),
    ("Social Media Thread", "X / Threads / LinkedIn"),
    ("Technical Comparison Table", "comparison and 'X vs Y' queries"),
    ("Expert Community Response", "Reddit / Quora / StackOverflow"),
    ("Data-Driven White Paper", "original research, in depth"),
    ("Article", "standard long-form content"),
    ("Podcast", "conversational audio"),
]

RECOMMENDATION_FIELDS = [
    ("Recommendation", "what to create, where it goes and what it contains"),
    ("Channel", "target domain"),
    ("ContentType", "one of the content type options"),
    ("ThoughtProcess", "why this fits the source and closes the KPI gap"),
    ("ContentTitle", "headline written for answer-engine extraction"),
    ("Timeline", "e.g. \"2-3 Weeks\""),
    ("Effort", "Low, Medium or High"),
    ("ExpectedBoost", "expected change in visibility, share of answer and sentiment"),
    ("Confidence", "integer 0-100"),
    ("Amplification", "how to reuse the piece across channels"),
    ("queryId", "the query ID exactly as given"),
]


def domain_analysis_system(brand_name: str) -> str:
    return f"You are an expert Content Strategist for {brand_name}. Return ONLY valid JSON array."


def recommendation_system(brand_name: str) -> str:
    return (
        f"Act like a world's best SEO + AEO (Answer Engine Optimization) Expert working for "
        f"{brand_name}. Respond ONLY with a valid JSON array."
    )


def build_domain_analysis_prompt(
    contexts: Sequence["QuerySourceContext"],
    brand_domain: Optional[str],
    competitor_domains: Sequence[str],
    brand_name: str,
) -> str:
    """
    Build the batched domain analysis prompt.

    Args:
        contexts: Query contexts to analyze
        brand_domain: Brand's own domain
        competitor_domains: Competitor domains
        brand_name: Brand display name

    Returns:
        Prompt string
    """
    competitors = ", ".join(competitor_domains) or "none"
    own = brand_domain or "unknown"

    blocks = []
    for idx, ctx in enumerate(contexts, 1):
        sources = "\n".join(f"- {d}" for d in ctx.domains)
        blocks.append(f"### Query {idx} (ID: {ctx.query_id})\nQuery: \"{ctx.query_text}\"\nSources:\n{sources}")

    return f"""Decide, for {brand_name} ({own}), what content action is realistic on each cited source below.

Brand domain: {own}
Competitor domains: {competitors}

Policy:
- The brand's own domain: contributionModel "direct_publish", verb "Publish", any fitting content type.
- Competitor domains: verb "Monitor/Counter", bestContentTypes [].
- Community platforms (Reddit, Quora, StackOverflow, forums): "community", verb "Post".
- Editorial and media sites: "earned_media", verb "Pitch". These cannot be published to directly.
- Open video platforms (YouTube, TikTok): "direct_publish", verb "Publish", video formats only.
- Any other third-party commercial site: "earned_media", verb "Monitor/Counter", bestContentTypes [].

Return one JSON object per source per query with the keys
queryId, domain, bestContentTypes, contributionModel, recommendedActionVerb, whyThisFit.
A source cited under two queries gets two objects, each judged in its own query context.

{chr(10).join(blocks)}

Return a single flat JSON array."""


def _format_group(idx: int, group: "QueryGroup", source_lines: List[str]) -> str:
    competitors = ", ".join(group.competitors) or "General (Brand Only)"
    sources = "\n".join(f"   - {s}" for s in source_lines) or "   - No specific sources identified"
    return (
        f"--- Query {idx} ---\n"
        f"ID: {group.query_id}\n"
        f"Text: \"{group.query_text}\"\n"
        f"Topic: {group.topic or 'Not specified'}\n"
        f"KPIs to Improve: {', '.join(group.metrics)}\n"
        f"Competitors to Target: {competitors}\n"
        f"Available Sources:\n{sources}"
    )


def build_recommendation_prompt(
    brand_name: str,
    groups: Sequence["QueryGroup"],
    source_context: Dict[str, List[str]],
    competitor_domains: Sequence[str],
    brand_domain: Optional[str],
) -> str:
    """
    Build the batched recommendation prompt.

    Args:
        brand_name: Brand display name
        groups: One group per selected query, in priority order
        source_context: query_id -> formatted source lines
        competitor_domains: Domains that must never be used as Channel
        brand_domain: Brand's own domain

    Returns:
        Prompt string
    """
    queries = "\n\n".join(
        _format_group(idx, group, source_context.get(group.query_id, []))
        for idx, group in enumerate(groups, 1)
    )
    options = "\n".join(f"- {name} ({hint})" for name, hint in CONTENT_TYPE_OPTIONS)
    fields = "\n".join(f"- {name}: {hint}" for name, hint in RECOMMENDATION_FIELDS)
    competitors = ", ".join(competitor_domains) or "none"

    return f"""{brand_name} is underperforming in AI answer engines on the queries below.
Each query lists the KPIs with a gap (visibility, soa, sentiment), the competitors ahead of the brand,
and the sources the answer engines cite, annotated with how the brand can interact with them.

{queries}

Rules:
1. Exactly one recommendation per query ID.
2. Channel must never be a competitor domain ({competitors}).
3. Respect each source's Interaction: if it says Pitch, do not propose publishing there.
4. Prefer a content type listed under the source's Best Fits. {brand_domain or "The brand's own site"} is always available for direct publishing.
5. Vary content types across queries and explain how the piece closes the stated KPI gap.

Content type options:
{options}

Return a JSON array with one object per query using exactly these keys:
{fields}"""
