"""
AEO Scrapability Scoring

Stateless, rule-based scoring of generated content against a rubric for
its content type. Each scorer returns 5-9 dimensions with a status and a
feedback line.

| Content type | Max |
|---|---|
| article, whitepaper, video, podcast, comparison_table | 70 |
| social_thread | 80 |
| expert_community_response | 105 |

Example Usage:
    from aeo_engine.scrapability import score_content

    result = score_content("comparison-table", markdown)
    print(result.total_score, result.breakdown["table_structure"].status)
"""

from .base import (
    AEOScoreResult,
    BaseScorer,
    ContentType,
    DimensionScore,
    DimensionStatus,
    ParsedContent,
    parse_content,
    parse_content_type,
)
from .article import ArticleScorer
from .whitepaper import WhitepaperScorer
from .video import VideoScorer
from .podcast import PodcastScorer
from .social_thread import SocialThreadScorer
from .comparison_table import ComparisonTableScorer
from .expert_response import ExpertResponseScorer
from .registry import SCORERS, get_scorer, score_content

__all__ = [
    "AEOScoreResult",
    "BaseScorer",
    "ContentType",
    "DimensionScore",
    "DimensionStatus",
    "ParsedContent",
    "parse_content",
    "parse_content_type",
    "ArticleScorer",
    "WhitepaperScorer",
    "VideoScorer",
    "PodcastScorer",
    "SocialThreadScorer",
    "ComparisonTableScorer",
    "ExpertResponseScorer",
    "SCORERS",
    "get_scorer",
    "score_content",
]
