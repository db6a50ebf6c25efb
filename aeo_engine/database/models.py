"""
SQLAlchemy Models for the AEO Opportunity Engine

Read side: brands, competitors, generated queries, per-response metric
facts (brand and competitor) and citations.
Write side: recommendation generations and their recommendations.

Ids are UUID strings and blobs are generic JSON so the same schema runs on
PostgreSQL in production and SQLite in tests.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text,
    ForeignKey, Index, JSON,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid4())


# =============================================================================
# TRACKED ENTITIES
# =============================================================================

class BrandRecord(Base):
    """Brand tracked in answer engines"""
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), index=True)

    name = Column(String(255), nullable=False)
    homepage_url = Column(String(500))
    industry = Column(String(255))

    # Aliases live under "aliases" or "brand_aliases"
    brand_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)

    competitors = relationship(
        "BrandCompetitorRecord",
        back_populates="brand",
        cascade="all, delete-orphan",
        order_by="BrandCompetitorRecord.display_order",
    )
    queries = relationship("GeneratedQueryRecord", back_populates="brand", cascade="all, delete-orphan")


class BrandCompetitorRecord(Base):
    """Competitor tracked for a brand"""
    __tablename__ = "brand_competitors"

    id = Column(String(36), primary_key=True, default=_uuid)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False)

    competitor_name = Column(String(255), nullable=False)
    competitor_url = Column(String(500))
    display_order = Column(Integer, default=0)

    brand = relationship("BrandRecord", back_populates="competitors")

    __table_args__ = (
        Index("idx_competitor_brand", "brand_id", "display_order"),
    )


class GeneratedQueryRecord(Base):
    """Query sent to the answer engines"""
    __tablename__ = "generated_queries"

    id = Column(String(36), primary_key=True, default=_uuid)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False)
    customer_id = Column(String(36), index=True)

    query_text = Column(Text, nullable=False)
    topic = Column(String(255))

    created_at = Column(DateTime, default=datetime.utcnow)

    brand = relationship("BrandRecord", back_populates="queries")


# =============================================================================
# MEASUREMENTS
# =============================================================================

class MetricFactRecord(Base):
    """One answer-engine response measured for a brand"""
    __tablename__ = "metric_facts"

    id = Column(String(36), primary_key=True, default=_uuid)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False)
    customer_id = Column(String(36))
    query_id = Column(String(36), ForeignKey("generated_queries.id"), nullable=False)

    collector_type = Column(String(50))  # chatgpt, perplexity, gemini ...
    processed_at = Column(DateTime, default=datetime.utcnow)

    # Brand values (nullable: the brand may be absent from the response)
    visibility_index = Column(Float)
    share_of_answer = Column(Float)
    sentiment_score = Column(Float)

    query = relationship("GeneratedQueryRecord")
    competitor_metrics = relationship(
        "CompetitorMetricRecord",
        back_populates="metric_fact",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_metric_brand_time", "brand_id", "processed_at"),
    )


class CompetitorMetricRecord(Base):
    """Competitor values inside one measured response"""
    __tablename__ = "competitor_metrics"

    id = Column(String(36), primary_key=True, default=_uuid)
    metric_fact_id = Column(String(36), ForeignKey("metric_facts.id"), nullable=False)
    competitor_id = Column(String(36), ForeignKey("brand_competitors.id"), nullable=False)

    visibility_index = Column(Float)
    share_of_answer = Column(Float)
    sentiment_score = Column(Float)

    metric_fact = relationship("MetricFactRecord", back_populates="competitor_metrics")
    competitor = relationship("BrandCompetitorRecord")


class CitationRecordRow(Base):
    """Source cited by an answer engine for a query"""
    __tablename__ = "citations"

    id = Column(String(36), primary_key=True, default=_uuid)
    query_id = Column(String(36), ForeignKey("generated_queries.id"), nullable=False)
    customer_id = Column(String(36))

    domain = Column(String(255))
    page_url = Column(String(1000))
    usage_count = Column(Integer, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_citation_query", "query_id"),
    )


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

class RecommendationGenerationRecord(Base):
    """One recommendation conversion run"""
    __tablename__ = "recommendation_generations"

    id = Column(String(36), primary_key=True, default=_uuid)
    brand_id = Column(String(36), ForeignKey("brands.id"), nullable=False)
    customer_id = Column(String(36))

    problems_detected = Column(Integer, default=0)
    status = Column(String(50), default="completed")
    generation_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)

    recommendations = relationship(
        "RecommendationRecord",
        back_populates="generation",
        cascade="all, delete-orphan",
        order_by="RecommendationRecord.display_order",
    )


class RecommendationRecord(Base):
    """One drafted recommendation"""
    __tablename__ = "recommendations"

    id = Column(String(36), primary_key=True, default=_uuid)
    generation_id = Column(String(36), ForeignKey("recommendation_generations.id"), nullable=False)
    brand_id = Column(String(36), nullable=False)
    customer_id = Column(String(36))
    query_id = Column(String(36))

    action = Column(Text, nullable=False)
    channel = Column(String(255))
    content_type = Column(String(100))
    asset_type = Column(String(100))
    rationale = Column(Text)
    content_title = Column(Text)
    timeline = Column(String(100))
    effort = Column(String(20))
    expected_boost = Column(String(100))
    confidence = Column(Integer)
    amplification_advice = Column(Text)
    target_competitors = Column(JSON, default=list)
    focus_area = Column(String(50))
    kpi = Column(String(50))
    priority = Column(String(20))
    display_order = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    generation = relationship("RecommendationGenerationRecord", back_populates="recommendations")
