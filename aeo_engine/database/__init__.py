"""
AEO Engine Database Layer

Usage:
    from aeo_engine.database import init_db, SqlMetricsStore

    init_db()
    store = SqlMetricsStore()
    brand = store.get_brand(brand_id, customer_id)
"""

from .models import (
    Base,
    BrandRecord,
    BrandCompetitorRecord,
    GeneratedQueryRecord,
    MetricFactRecord,
    CompetitorMetricRecord,
    CitationRecordRow,
    RecommendationGenerationRecord,
    RecommendationRecord,
)
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    get_session_factory,
    get_db,
    get_db_context,
    init_db,
    check_db_connection,
)
from .repository import SqlMetricsStore

__all__ = [
    "Base",
    "BrandRecord",
    "BrandCompetitorRecord",
    "GeneratedQueryRecord",
    "MetricFactRecord",
    "CompetitorMetricRecord",
    "CitationRecordRow",
    "RecommendationGenerationRecord",
    "RecommendationRecord",
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_db_context",
    "init_db",
    "check_db_connection",
    "SqlMetricsStore",
]
