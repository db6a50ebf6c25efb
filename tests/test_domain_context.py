"""
Tests for domain filtering, policy classification and LLM guard rails.
"""

import asyncio

import pytest

from aeo_engine.recommendations import (
    ContributionModel,
    DomainClassification,
    DomainContextResolver,
    DomainRole,
    QuerySourceContext,
    apply_guard_rails,
    classify_domain_by_policy,
    domain_role,
)
from aeo_engine.utils.domain_filter import (
    build_competitor_domains,
    is_community_domain,
    is_editorial_domain,
    normalize_domain,
)

from conftest import FakeLLM


BRAND = "acme.com"
COMPETITORS = ["rival.com"]


class TestDomainFilter:

    @pytest.mark.parametrize("raw,expected", [
        ("https://www.Acme.com/pricing?x=1", "acme.com"),
        ("acme.com:443", "acme.com"),
        ("  WWW.reddit.com  ", "reddit.com"),
        ("http://user@blog.acme.com/#top", "blog.acme.com"),
        (None, ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_domain(raw) == expected

    def test_community(self):
        assert is_community_domain("old.reddit.com")
        assert is_community_domain("forum.example.org")
        assert not is_community_domain("example.org")

    def test_editorial(self):
        assert is_editorial_domain("techcrunch.com")
        assert is_editorial_domain("payrollnews.io")
        assert not is_editorial_domain("news.rival.com")

    @pytest.mark.parametrize("domain", [
        "wordpress.com", "acmeblog.wordpress.com", "reviews.io", "softwarereviews.com",
    ])
    def test_blog_hosts_and_review_aggregators_not_editorial(self, domain):
        assert not is_editorial_domain(domain)
        assert domain_role(domain, BRAND, COMPETITORS) == DomainRole.THIRD_PARTY

    def test_media_keyword_still_marks_outlets(self):
        assert is_editorial_domain("payrollpress.com")
        assert is_editorial_domain("hrreview.co")

    def test_competitor_domains_exclude_brand_and_platforms(self):
        domains = build_competitor_domains(
            ["https://rival.com", "www.rival.com", "reddit.com", "acme.com", None, "contoso.com"],
            brand_domain="acme.com",
        )
        assert domains == ["rival.com", "contoso.com"]


class TestPolicy:

    @pytest.mark.parametrize("domain,role", [
        ("acme.com", DomainRole.BRAND),
        ("docs.acme.com", DomainRole.BRAND),
        ("rival.com", DomainRole.COMPETITOR),
        ("youtube.com", DomainRole.VIDEO),
        ("reddit.com", DomainRole.COMMUNITY),
        ("forbes.com", DomainRole.EDITORIAL),
        ("g2.com", DomainRole.THIRD_PARTY),
    ])
    def test_roles(self, domain, role):
        assert domain_role(domain, BRAND, COMPETITORS) == role

    def test_brand_is_direct_publish(self):
        result = classify_domain_by_policy("acme.com", "q1", BRAND, COMPETITORS)
        assert result.contribution_model == ContributionModel.DIRECT_PUBLISH
        assert result.recommended_action_verb == "Publish"

    def test_competitor_is_monitor_only(self):
        result = classify_domain_by_policy("rival.com", "q1", BRAND, COMPETITORS)
        assert result.recommended_action_verb == "Monitor/Counter"
        assert result.best_content_types == []

    def test_community_and_editorial(self):
        community = classify_domain_by_policy("reddit.com", "q1", BRAND, COMPETITORS)
        editorial = classify_domain_by_policy("forbes.com", "q1", BRAND, COMPETITORS)
        assert community.contribution_model == ContributionModel.COMMUNITY
        assert editorial.contribution_model == ContributionModel.EARNED_MEDIA
        assert editorial.recommended_action_verb == "Pitch"

    def test_format_context(self):
        line = classify_domain_by_policy("reddit.com", "q1", BRAND, COMPETITORS).format_context()
        assert line.startswith("reddit.com | Best Fits: [Discussion thread")
        assert "| Interaction: Post (community)" in line


class TestGuardRails:

    def _candidate(self, domain, model, verb="Publish", types=None, why="model says so"):
        return DomainClassification(
            domain=domain,
            query_id="q1",
            best_content_types=types or ["Article"],
            contribution_model=model,
            recommended_action_verb=verb,
            rationale=why,
        )

    def test_model_cannot_grant_publish_on_editorial(self):
        result = apply_guard_rails(
            self._candidate("forbes.com", ContributionModel.DIRECT_PUBLISH, types=["Expert Quote"]),
            BRAND, COMPETITORS,
        )
        assert result.contribution_model == ContributionModel.EARNED_MEDIA
        assert result.recommended_action_verb == "Pitch"
        assert result.best_content_types == ["Expert Quote"]
        assert result.rationale == "model says so"

    def test_competitor_locked_to_policy(self):
        result = apply_guard_rails(
            self._candidate("rival.com", ContributionModel.PAID_PLACEMENT, verb="Buy"),
            BRAND, COMPETITORS,
        )
        assert result == classify_domain_by_policy("rival.com", "q1", BRAND, COMPETITORS)

    def test_brand_keeps_model_content_types(self):
        result = apply_guard_rails(
            self._candidate("acme.com", ContributionModel.EARNED_MEDIA, verb="Pitch", types=["Case Study"]),
            BRAND, COMPETITORS,
        )
        assert result.contribution_model == ContributionModel.DIRECT_PUBLISH
        assert result.recommended_action_verb == "Publish"
        assert result.best_content_types == ["Case Study"]


class TestResolver:

    CONTEXTS = [
        QuerySourceContext("q1", "Acme vs Rival", ["reddit.com", "forbes.com", "rival.com"]),
        QuerySourceContext("q2", "Acme pricing", []),
    ]

    @pytest.mark.asyncio
    async def test_policy_only_without_llm(self):
        result = await DomainContextResolver(llm=None).resolve(self.CONTEXTS, BRAND, COMPETITORS, "Acme")

        assert set(result) == {"q1"}
        assert set(result["q1"]) == {"reddit.com", "forbes.com", "rival.com"}
        assert result["q1"]["reddit.com"].contribution_model == ContributionModel.COMMUNITY

    @pytest.mark.asyncio
    async def test_llm_items_guarded_and_filtered(self):
        llm = FakeLLM(domain_items=[
            {
                "queryId": "q1",
                "domain": "https://www.forbes.com",
                "bestContentTypes": ["Expert Quote"],
                "contributionModel": "direct_publish",
                "recommendedActionVerb": "Publish",
                "whyThisFit": "Forbes runs contributor columns",
            },
            {"queryId": "q1", "domain": "unrelated.com", "contributionModel": "community"},
            {"queryId": "q9", "domain": "reddit.com", "contributionModel": "community"},
            {"queryId": "q1", "domain": "reddit.com", "contributionModel": "not-a-model"},
            "not an object",
        ])

        result = await DomainContextResolver(llm=llm).resolve(self.CONTEXTS, BRAND, COMPETITORS, "Acme")

        assert len(llm.calls) == 1
        assert "Content Strategist" in llm.calls[0]["system"]
        assert set(result) == {"q1"}
        forbes = result["q1"]["forbes.com"]
        assert forbes.contribution_model == ContributionModel.EARNED_MEDIA
        assert forbes.best_content_types == ["Expert Quote"]
        assert forbes.rationale == "Forbes runs contributor columns"
        # Dropped items fall back to policy
        assert result["q1"]["reddit.com"].recommended_action_verb == "Post"

    @pytest.mark.asyncio
    async def test_llm_failure_returns_empty_map(self):
        result = await DomainContextResolver(llm=FakeLLM(fail=True)).resolve(
            self.CONTEXTS, BRAND, COMPETITORS, "Acme",
        )
        assert result == {}

    @pytest.mark.asyncio
    async def test_timeout_returns_empty_map(self):
        class SlowLLM(FakeLLM):
            async def generate_json_array(self, prompt, system=None, max_tokens=None):
                await asyncio.sleep(1)
                return []

        result = await DomainContextResolver(llm=SlowLLM(), timeout_seconds=0.01).resolve(
            self.CONTEXTS, BRAND, COMPETITORS, "Acme",
        )
        assert result == {}

    @pytest.mark.asyncio
    async def test_no_domains_skips_llm(self):
        llm = FakeLLM()
        result = await DomainContextResolver(llm=llm).resolve(
            [QuerySourceContext("q2", "Acme pricing", [])], BRAND, COMPETITORS, "Acme",
        )
        assert result == {}
        assert llm.calls == []
