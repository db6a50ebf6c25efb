"""Utility modules for the AEO Opportunity Engine."""

from .config import Settings, get_settings
from .domain_filter import (
    normalize_domain,
    matches_domain,
    is_brand_domain,
    is_competitor_domain,
    is_community_domain,
    is_editorial_domain,
    is_video_platform,
    build_competitor_domains,
)

__all__ = [
    "Settings",
    "get_settings",
    # Domain policy
    "normalize_domain",
    "matches_domain",
    "is_brand_domain",
    "is_competitor_domain",
    "is_community_domain",
    "is_editorial_domain",
    "is_video_platform",
    "build_competitor_domains",
]
