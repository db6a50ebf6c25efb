"""
API Endpoints for Opportunities and Recommendations

Handles:
1. Identify ranked opportunities for a brand
2. Convert the top opportunities into stored recommendations
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from aeo_engine.analyzer import ClaudeClient, GenerativeTextClient
from aeo_engine.database import SqlMetricsStore
from aeo_engine.errors import BrandNotFoundError, DataFetchError
from aeo_engine.opportunity import OpportunityIdentifier
from aeo_engine.recommendations import RecommendationSynthesizer
from aeo_engine.utils.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/brands",
    tags=["Opportunities"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_store() -> SqlMetricsStore:
    """Store dependency (overridden in tests)."""
    return SqlMetricsStore()


def get_llm() -> Optional[GenerativeTextClient]:
    """Claude client, or None when no API key is configured."""
    if not get_settings().ANTHROPIC_API_KEY:
        return None
    return ClaudeClient()


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    parts = [p.strip() for p in value.split(",") if p.strip()]
    return parts or None


# =============================================================================
# REQUEST MODELS
# =============================================================================

class RecommendationRequest(BaseModel):
    """Request to convert opportunities into recommendations."""
    customer_id: Optional[str] = None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/{brand_id}/opportunities")
def identify_opportunities(
    brand_id: str,
    customer_id: Optional[str] = Query(None, description="Tenant scope"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Lookback window in days"),
    collectors: Optional[str] = Query(None, description="Comma-separated collectors, e.g. chatgpt,perplexity"),
    topics: Optional[str] = Query(None, description="Comma-separated topics"),
    store: SqlMetricsStore = Depends(get_store),
):
    """Identify ranked opportunities for a brand."""
    identifier = OpportunityIdentifier(store)
    try:
        response = identifier.identify_opportunities(
            brand_id,
            customer_id=customer_id,
            days=days,
            collectors=_split_csv(collectors),
            topics=_split_csv(topics),
        )
    except BrandNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DataFetchError as e:
        logger.error(f"Opportunity identification failed for {brand_id}: {e}")
        raise HTTPException(status_code=503, detail="Metrics store unavailable")

    return response.to_dict()


@router.post("/{brand_id}/recommendations")
async def convert_to_recommendations(
    brand_id: str,
    request: RecommendationRequest,
    store: SqlMetricsStore = Depends(get_store),
    llm: Optional[GenerativeTextClient] = Depends(get_llm),
):
    """Convert the brand's top opportunities into stored recommendations."""
    synthesizer = RecommendationSynthesizer(
        identifier=OpportunityIdentifier(store),
        llm=llm,
        store=store,
    )
    try:
        result = await synthesizer.convert_to_recommendations(brand_id, request.customer_id)
    except BrandNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DataFetchError as e:
        logger.error(f"Recommendation conversion failed for {brand_id}: {e}")
        raise HTTPException(status_code=503, detail="Metrics store unavailable")

    return result.to_dict()
