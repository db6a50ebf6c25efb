"""
Scorer registry: one scorer per content type, article as the default.
"""

import logging
from typing import Dict, Optional, Type, Union

from .article import ArticleScorer
from .base import AEOScoreResult, BaseScorer, ContentType, parse_content_type
from .comparison_table import ComparisonTableScorer
from .expert_response import ExpertResponseScorer
from .podcast import PodcastScorer
from .social_thread import SocialThreadScorer
from .video import VideoScorer
from .whitepaper import WhitepaperScorer

logger = logging.getLogger(__name__)


SCORERS: Dict[ContentType, Type[BaseScorer]] = {
    ContentType.ARTICLE: ArticleScorer,
    ContentType.WHITEPAPER: WhitepaperScorer,
    ContentType.VIDEO: VideoScorer,
    ContentType.PODCAST: PodcastScorer,
    ContentType.SOCIAL_THREAD: SocialThreadScorer,
    ContentType.COMPARISON_TABLE: ComparisonTableScorer,
    ContentType.EXPERT_COMMUNITY_RESPONSE: ExpertResponseScorer,
}


def get_scorer(content_type: Union[str, ContentType, None]) -> BaseScorer:
    """Return a scorer for the content type; unknown types get the article scorer."""
    parsed = parse_content_type(content_type)
    return SCORERS.get(parsed, ArticleScorer)()


def score_content(
    content_type: Union[str, ContentType, None],
    raw_text: Optional[str],
    reference_year: Optional[int] = None,
) -> AEOScoreResult:
    """
    Score content against its type's scrapability rubric.

    Args:
        content_type: Content type name or alias
        raw_text: Content as text, markdown or JSON payload
        reference_year: Year for timeliness checks (default: current year)

    Returns:
        AEOScoreResult with total clamped to [0, type max]
    """
    scorer = get_scorer(content_type)
    result = scorer.score(raw_text, reference_year=reference_year)
    logger.debug(f"Scored {result.content_type.value}: {result.total_score}/{result.max_score}")
    return result
