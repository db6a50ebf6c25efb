"""
API Endpoint for AEO Scrapability Scoring
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from aeo_engine.scrapability import score_content

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/aeo",
    tags=["Scoring"],
)


class ScoreRequest(BaseModel):
    """Content to score."""
    content_type: Optional[str] = Field(
        default="article",
        description="article, whitepaper, video, podcast, social_thread, comparison_table, "
                    "expert_community_response (aliases accepted)",
    )
    content: str = Field(default="", description="Plain text, markdown or a JSON content payload")
    reference_year: Optional[int] = Field(default=None, description="Year used for timeliness checks")


@router.post("/score")
def score(request: ScoreRequest):
    """Score content for answer-engine scrapability."""
    result = score_content(request.content_type, request.content, reference_year=request.reference_year)
    logger.info(f"Scored {result.content_type.value}: {result.total_score}/{result.max_score}")
    return result.to_dict()
