"""
Store Boundaries

Abstract read/write capabilities the core depends on. The SQLAlchemy
adapter in aeo_engine.database implements both; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from . import Brand, CitationRecord, Competitor, MetricSample

if TYPE_CHECKING:
    from ..recommendations.synthesizer import Recommendation


class MetricsStore(ABC):
    """Read capability over brands, competitors, metric samples and citations."""

    @abstractmethod
    def get_brand(self, brand_id: str, customer_id: Optional[str] = None) -> Optional[Brand]:
        """Return the brand, or None if it does not exist for the tenant."""
        pass

    @abstractmethod
    def get_competitors(self, brand_id: str, customer_id: Optional[str] = None) -> List[Competitor]:
        """Return the brand's tracked competitors in display order."""
        pass

    @abstractmethod
    def fetch_metric_samples(
        self,
        brand_id: str,
        customer_id: Optional[str],
        start: datetime,
        end: datetime,
        collector_types: Optional[Sequence[str]] = None,
    ) -> List[MetricSample]:
        """
        Return one sample per (query, answer-engine response) in the window.

        Raises:
            DataFetchError: if the underlying store cannot be read
        """
        pass

    @abstractmethod
    def fetch_citations(
        self,
        query_ids: Sequence[str],
        customer_id: Optional[str] = None,
    ) -> List[CitationRecord]:
        """
        Return citation records for the given queries, ordered by usage
        count descending.

        Raises:
            DataFetchError: if the underlying store cannot be read
        """
        pass


class RecommendationStore(ABC):
    """Write capability for recommendation batches."""

    @abstractmethod
    def save_recommendation_batch(
        self,
        brand_id: str,
        customer_id: Optional[str],
        recommendations: List["Recommendation"],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Persist a generation record and all of its recommendations in one
        transaction. Returns the generation id.
        """
        pass
