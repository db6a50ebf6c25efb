"""
AEO Opportunity Engine API

FastAPI application exposing opportunity identification, recommendation
conversion and scrapability scoring.
"""

import logging
import sys
from datetime import datetime

from fastapi import FastAPI

from aeo_engine import __version__
from aeo_engine.database import check_db_connection, init_db
from aeo_engine.utils.config import get_settings

from api.opportunities import router as opportunities_router
from api.scoring import router as scoring_router

# Log to stdout
logging.basicConfig(
    level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="AEO Opportunity Engine",
    description="Answer-engine opportunity identification and content recommendations",
    version=__version__,
)

app.include_router(opportunities_router)
app.include_router(scoring_router)


# ============================================================================
# STARTUP - Initialize Database
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Create tables on startup."""
    logger.info("Initializing database...")
    try:
        init_db()
    except Exception as e:
        # Scoring works without a database
        logger.error(f"Database initialization failed: {e}")


# ============================================================================
# HEALTH
# ============================================================================

@app.get("/health")
async def health():
    """Health check including database status."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "database": "connected" if check_db_connection() else "disconnected",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
