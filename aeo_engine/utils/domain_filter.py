"""
Domain Policy Utilities

Shared domain lists and matching logic used wherever the engine has to
decide what a brand can realistically do on a cited source:
- Domain context resolution (who can publish what, and how)
- Competitor domain exclusion for recommendation channels

The brand must never be told to "publish" on a domain it does not control,
so every list here errs on the side of NOT granting publishing rights.
"""

import re
from typing import Iterable, List, Optional, Set
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# COMMUNITY PLATFORMS - anyone can post, brand participates as a member
# =============================================================================

# Discussion & Q&A
DISCUSSION_PLATFORMS = {
    "reddit.com", "redd.it",
    "quora.com",
    "stackoverflow.com", "stackexchange.com", "superuser.com", "serverfault.com",
    "news.ycombinator.com",
    "discord.com", "discord.gg",
    "producthunt.com",
    "indiehackers.com",
    "dev.to",
    "community.spiceworks.com",
    "tripadvisor.com",
}

# Social Media Platforms (brand posts from its own account)
SOCIAL_MEDIA = {
    "facebook.com", "fb.com",
    "twitter.com", "x.com",
    "instagram.com",
    "linkedin.com",
    "pinterest.com",
    "tumblr.com",
    "threads.net",
    "mastodon.social",
    "medium.com",
    "substack.com",
}

# Subdomain / label hints for self-hosted forums
FORUM_INDICATORS = ("forum", "forums", "community", "discuss", "discussion", "answers", "boards")


# =============================================================================
# VIDEO PLATFORMS - brand can run its own channel
# =============================================================================

VIDEO_PLATFORMS = {
    "youtube.com", "youtu.be",
    "vimeo.com",
    "tiktok.com",
    "dailymotion.com",
    "twitch.tv",
}


# =============================================================================
# EDITORIAL / MEDIA - coverage has to be earned (pitched)
# =============================================================================

NEWS_MEDIA = {
    # International
    "bbc.com", "bbc.co.uk",
    "cnn.com",
    "nytimes.com",
    "theguardian.com",
    "reuters.com",
    "bloomberg.com",
    "forbes.com",
    "huffpost.com",
    "washingtonpost.com",
    "wsj.com",
    "techcrunch.com",
    "theverge.com",
    "wired.com",
    "mashable.com",
    "businessinsider.com",
    "zdnet.com",
    "cnet.com",
    "engadget.com",
    "venturebeat.com",
    "fastcompany.com",
    "inc.com",
    "entrepreneur.com",
    "hbr.org",
    "statnews.com",
    "medscape.com",
    "fiercepharma.com",
    "fiercebiotech.com",
    "dezeen.com",
    "housebeautiful.com",
    "architecturaldigest.com",
    "pcmag.com",
    "tomsguide.com",
    "techradar.com",
}

# Blog hosts and review aggregators whose names contain a media keyword
# ("wordpress" has "press", "softwarereviews" has "review") but are not outlets
NON_EDITORIAL_SITES = {
    "wordpress.com",
    "wordpress.org",
    "consumerreviews.com",
    "reviews.io",
    "reviewtrackers.com",
    "softwarereviews.com",
}

# Substrings that mark a domain as editorial when it is in neither list above
MEDIA_KEYWORDS = (
    "news", "times", "journal", "daily", "herald", "chronicle",
    "gazette", "tribune", "magazine", "mag.", "weekly", "review",
    "insider", "digest", "press",
)


# =============================================================================
# NORMALIZATION & MATCHING
# =============================================================================

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def normalize_domain(value: Optional[str]) -> str:
    """
    Reduce a URL or domain to a bare, lowercase domain.

    "https://www.Example.com:443/pricing" -> "example.com"

    Args:
        value: URL or domain string

    Returns:
        Normalized domain, or empty string if nothing usable
    """
    if not value:
        return ""

    domain = value.strip().lower()
    domain = _SCHEME_RE.sub("", domain)
    domain = domain.split("/", 1)[0]
    domain = domain.split("?", 1)[0]
    domain = domain.split("#", 1)[0]
    domain = domain.split("@")[-1]
    domain = domain.split(":", 1)[0]

    if domain.startswith("www."):
        domain = domain[4:]

    return domain.strip(".")


def matches_domain(domain: Optional[str], candidates: Iterable[str]) -> bool:
    """
    Check whether a domain equals, or is a subdomain of, any candidate.

    Args:
        domain: Domain to check (e.g., "business.facebook.com")
        candidates: Domains to compare against (e.g., {"facebook.com"})

    Returns:
        True on exact or subdomain match
    """
    normalized = normalize_domain(domain)
    if not normalized:
        return False

    for candidate in candidates:
        candidate = normalize_domain(candidate)
        if not candidate:
            continue
        if normalized == candidate or normalized.endswith("." + candidate):
            return True

    return False


def is_brand_domain(domain: Optional[str], brand_domain: Optional[str]) -> bool:
    """True when the domain is the brand's homepage domain or one of its subdomains."""
    if not brand_domain:
        return False
    return matches_domain(domain, [brand_domain])


def is_competitor_domain(domain: Optional[str], competitor_domains: Iterable[str]) -> bool:
    """True when the domain belongs to a tracked competitor."""
    return matches_domain(domain, competitor_domains)


def is_community_domain(domain: Optional[str]) -> bool:
    """
    Check if a domain is a community platform where anyone can post.

    Uses multiple matching strategies:
    1. Known discussion and social platforms (with subdomains)
    2. Forum-style labels (forum.example.com, example.com/community is not visible here)

    Args:
        domain: Domain name to check

    Returns:
        True if the brand can participate by posting
    """
    normalized = normalize_domain(domain)
    if not normalized:
        return False

    if matches_domain(normalized, DISCUSSION_PLATFORMS | SOCIAL_MEDIA):
        return True

    labels = normalized.split(".")
    return any(label in FORUM_INDICATORS for label in labels[:-1])


def is_video_platform(domain: Optional[str]) -> bool:
    """True for open video platforms where the brand can run a channel."""
    return matches_domain(domain, VIDEO_PLATFORMS)


def is_editorial_domain(domain: Optional[str]) -> bool:
    """
    Check if a domain is an editorial/media site (coverage must be pitched).

    Args:
        domain: Domain name to check

    Returns:
        True for known media outlets or domains carrying media keywords
    """
    normalized = normalize_domain(domain)
    if not normalized:
        return False

    if matches_domain(normalized, NEWS_MEDIA):
        return True
    if matches_domain(normalized, NON_EDITORIAL_SITES):
        return False

    # Only the registrable part is inspected, so "news.example.com" style
    # subdomains of commercial sites are not mistaken for outlets.
    parts = normalized.split(".")
    base_name = parts[-2] if len(parts) >= 2 else parts[0]
    return any(keyword.rstrip(".") in base_name for keyword in MEDIA_KEYWORDS)


# =============================================================================
# COMPETITOR EXCLUSION
# =============================================================================

# Platforms never treated as competitor domains even if misconfigured as such
PLATFORM_WHITELIST = DISCUSSION_PLATFORMS | SOCIAL_MEDIA | VIDEO_PLATFORMS | {
    "wikipedia.org",
    "github.com",
    "wordpress.com",
}


def build_competitor_domains(
    competitor_domains: Iterable[Optional[str]],
    brand_domain: Optional[str] = None,
) -> List[str]:
    """
    Build the normalized, de-duplicated list of competitor domains.

    The brand's own domain and well-known platforms are always dropped,
    even if they were entered as competitors.

    Args:
        competitor_domains: Raw competitor domains or URLs
        brand_domain: Brand's homepage domain (whitelisted)

    Returns:
        Ordered list of competitor domains
    """
    result: List[str] = []
    seen: Set[str] = set()
    skipped = 0

    for raw in competitor_domains:
        domain = normalize_domain(raw)
        if not domain or domain in seen:
            continue
        if is_brand_domain(domain, brand_domain) or matches_domain(domain, PLATFORM_WHITELIST):
            skipped += 1
            continue
        seen.add(domain)
        result.append(domain)

    if skipped:
        logger.info(f"Competitor domains: skipped {skipped} brand/platform entries")

    return result
