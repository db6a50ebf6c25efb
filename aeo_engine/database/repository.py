"""
Repository Layer - SQLAlchemy adapter for the store boundaries

SqlMetricsStore implements both MetricsStore (reads) and
RecommendationStore (atomic batch write). Driver errors are wrapped in
DataFetchError / PersistenceError so the core never sees SQLAlchemy types.
"""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..errors import DataFetchError, PersistenceError
from ..models import (
    Brand,
    CitationRecord,
    Competitor,
    CompetitorSample,
    MetricSample,
    MetricsStore,
    RecommendationStore,
)
from ..opportunity.helpers import extract_aliases
from .models import (
    BrandCompetitorRecord,
    BrandRecord,
    CitationRecordRow,
    GeneratedQueryRecord,
    MetricFactRecord,
    RecommendationGenerationRecord,
    RecommendationRecord,
)
from .session import get_db_context

logger = logging.getLogger(__name__)


class SqlMetricsStore(MetricsStore, RecommendationStore):
    """
    Store backed by the SQLAlchemy schema in aeo_engine.database.models.

    Usage:
        store = SqlMetricsStore()
        brand = store.get_brand(brand_id, customer_id)

    Tests pass their own session factory bound to an in-memory engine.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory

    # =========================================================================
    # READS
    # =========================================================================

    def get_brand(self, brand_id: str, customer_id: Optional[str] = None) -> Optional[Brand]:
        try:
            with get_db_context(self.session_factory) as db:
                stmt = select(BrandRecord).where(BrandRecord.id == brand_id)
                if customer_id:
                    stmt = stmt.where(BrandRecord.customer_id == customer_id)
                row = db.execute(stmt).scalar_one_or_none()
                if row is None:
                    return None
                return Brand(
                    id=row.id,
                    name=row.name,
                    customer_id=row.customer_id,
                    aliases=extract_aliases(row.brand_metadata),
                    homepage_url=row.homepage_url,
                    industry=row.industry,
                )
        except SQLAlchemyError as e:
            raise DataFetchError(f"Brand lookup failed for {brand_id}: {e}") from e

    def get_competitors(self, brand_id: str, customer_id: Optional[str] = None) -> List[Competitor]:
        try:
            with get_db_context(self.session_factory) as db:
                stmt = (
                    select(BrandCompetitorRecord)
                    .where(BrandCompetitorRecord.brand_id == brand_id)
                    .order_by(BrandCompetitorRecord.display_order)
                )
                rows = db.execute(stmt).scalars().all()
                return [
                    Competitor(id=r.id, name=r.competitor_name, domain=r.competitor_url)
                    for r in rows
                ]
        except SQLAlchemyError as e:
            raise DataFetchError(f"Competitor lookup failed for {brand_id}: {e}") from e

    def fetch_metric_samples(
        self,
        brand_id: str,
        customer_id: Optional[str],
        start: datetime,
        end: datetime,
        collector_types: Optional[Sequence[str]] = None,
    ) -> List[MetricSample]:
        try:
            with get_db_context(self.session_factory) as db:
                stmt = (
                    select(MetricFactRecord, GeneratedQueryRecord)
                    .join(GeneratedQueryRecord, MetricFactRecord.query_id == GeneratedQueryRecord.id)
                    .where(MetricFactRecord.brand_id == brand_id)
                    .where(MetricFactRecord.processed_at >= start)
                    .where(MetricFactRecord.processed_at <= end)
                    .options(selectinload(MetricFactRecord.competitor_metrics))
                    .order_by(MetricFactRecord.processed_at)
                )
                if customer_id:
                    stmt = stmt.where(MetricFactRecord.customer_id == customer_id)
                if collector_types:
                    stmt = stmt.where(MetricFactRecord.collector_type.in_(list(collector_types)))

                competitor_names = self._competitor_names(db, brand_id)

                samples = []
                for fact, query in db.execute(stmt).all():
                    competitors: Dict[str, CompetitorSample] = {}
                    for cm in fact.competitor_metrics:
                        name = competitor_names.get(cm.competitor_id)
                        if not name:
                            continue
                        competitors[name] = CompetitorSample(
                            visibility=cm.visibility_index,
                            share_of_answer=cm.share_of_answer,
                            sentiment=cm.sentiment_score,
                        )
                    samples.append(MetricSample(
                        query_id=query.id,
                        query_text=query.query_text,
                        topic=query.topic,
                        collector_type=fact.collector_type,
                        processed_at=fact.processed_at,
                        brand_visibility=fact.visibility_index,
                        brand_share_of_answer=fact.share_of_answer,
                        brand_sentiment=fact.sentiment_score,
                        competitors=competitors,
                    ))

                logger.debug(f"Fetched {len(samples)} metric samples for brand {brand_id}")
                return samples
        except SQLAlchemyError as e:
            raise DataFetchError(f"Metric fetch failed for {brand_id}: {e}") from e

    def fetch_citations(
        self,
        query_ids: Sequence[str],
        customer_id: Optional[str] = None,
    ) -> List[CitationRecord]:
        if not query_ids:
            return []

        try:
            with get_db_context(self.session_factory) as db:
                stmt = (
                    select(CitationRecordRow)
                    .where(CitationRecordRow.query_id.in_(list(query_ids)))
                    .order_by(CitationRecordRow.usage_count.desc())
                )
                if customer_id:
                    stmt = stmt.where(CitationRecordRow.customer_id == customer_id)
                return [
                    CitationRecord(
                        query_id=row.query_id,
                        domain=row.domain,
                        url=row.page_url,
                        usage_count=row.usage_count,
                    )
                    for row in db.execute(stmt).scalars().all()
                ]
        except SQLAlchemyError as e:
            raise DataFetchError(f"Citation fetch failed: {e}") from e

    @staticmethod
    def _competitor_names(db: Session, brand_id: str) -> "OrderedDict[str, str]":
        rows = db.execute(
            select(BrandCompetitorRecord.id, BrandCompetitorRecord.competitor_name)
            .where(BrandCompetitorRecord.brand_id == brand_id)
        ).all()
        return OrderedDict((r[0], r[1]) for r in rows)

    # =========================================================================
    # WRITES
    # =========================================================================

    def save_recommendation_batch(
        self,
        brand_id: str,
        customer_id: Optional[str],
        recommendations: List[Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Persist a generation record and its recommendations in one
        transaction. Nothing is written if any insert fails.

        Raises:
            PersistenceError: if the transaction was rolled back
        """
        try:
            with get_db_context(self.session_factory) as db:
                generation = RecommendationGenerationRecord(
                    brand_id=brand_id,
                    customer_id=customer_id,
                    problems_detected=len(recommendations),
                    status="completed",
                    generation_metadata=dict(metadata or {}),
                )
                db.add(generation)
                db.flush()

                for rec in recommendations:
                    db.add(RecommendationRecord(
                        generation_id=generation.id,
                        brand_id=brand_id,
                        customer_id=customer_id,
                        query_id=rec.query_id,
                        action=rec.action,
                        channel=rec.channel,
                        content_type=rec.content_type,
                        asset_type=rec.asset_type,
                        rationale=rec.rationale,
                        content_title=rec.content_title,
                        timeline=rec.timeline,
                        effort=rec.effort,
                        expected_boost=rec.expected_boost,
                        confidence=rec.confidence,
                        amplification_advice=rec.amplification_advice,
                        target_competitors=list(rec.target_competitors),
                        focus_area=rec.focus_area,
                        kpi=rec.kpi,
                        priority=rec.priority,
                        display_order=rec.display_order,
                    ))

                generation_id = generation.id

            logger.info(f"Stored generation {generation_id} with {len(recommendations)} recommendations")
            return generation_id
        except SQLAlchemyError as e:
            logger.error(f"Recommendation batch rolled back for brand {brand_id}: {e}")
            raise PersistenceError(f"Failed to save recommendations: {e}") from e
