"""
Query Classifier

Assigns each query one of three categories based on which entities the
query text names:

1. Brand and at least one competitor
2. Brand only
3. Neither (unbiased); every tracked competitor becomes a comparison target
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .helpers import QueryCategory


@dataclass
class QueryClassification:
    """Category plus the competitors the query is compared against."""
    category: QueryCategory
    competitors_in_query: List[str] = field(default_factory=list)

    @property
    def has_brand(self) -> bool:
        return self.category != QueryCategory.UNBIASED


def _contains(haystack: str, needle: Optional[str]) -> bool:
    if not needle or not needle.strip():
        return False
    return needle.strip().lower() in haystack


def classify_query(
    query_text: Optional[str],
    brand_name: str,
    brand_aliases: Optional[Sequence[str]] = None,
    competitor_names: Optional[Sequence[str]] = None,
) -> QueryClassification:
    """
    Classify a query by the brand and competitor names it contains.

    Matching is a case-insensitive substring test. Never raises; empty
    inputs simply produce fewer matches.

    Args:
        query_text: Query as sent to the answer engines
        brand_name: Brand display name
        brand_aliases: Alternative brand names
        competitor_names: Tracked competitor names, in display order

    Returns:
        QueryClassification
    """
    text = (query_text or "").lower()
    competitors = [c for c in (competitor_names or []) if c and c.strip()]

    names = [brand_name] + list(brand_aliases or [])
    has_brand = any(_contains(text, name) for name in names)

    in_query = [c for c in competitors if _contains(text, c)]

    if has_brand and in_query:
        return QueryClassification(QueryCategory.BRAND_AND_COMPETITOR, in_query)
    if has_brand:
        return QueryClassification(QueryCategory.BRAND_ONLY, [])
    return QueryClassification(QueryCategory.UNBIASED, list(competitors))
