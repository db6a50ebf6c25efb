"""
Opportunity Helper Functions and Constants

Contains the fixed threshold policy, metric weights, severity buckets and
small utility functions used across opportunity identification.
"""

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


# ============================================================================
# ENUMS
# ============================================================================

class QueryCategory(int, Enum):
    """How a query relates to the brand and its competitors."""
    BRAND_AND_COMPETITOR = 1   # Brand and at least one competitor named
    BRAND_ONLY = 2             # Brand named, no competitor
    UNBIASED = 3               # Neither brand nor competitor named


class MetricName(str, Enum):
    """Metrics tracked per answer-engine response."""
    VISIBILITY = "visibility"
    SOA = "soa"
    SENTIMENT = "sentiment"


class Severity(str, Enum):
    """Qualitative bucket derived from gap magnitude."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


METRIC_ORDER: List[MetricName] = [
    MetricName.VISIBILITY,
    MetricName.SOA,
    MetricName.SENTIMENT,
]


# ============================================================================
# THRESHOLD POLICY (fixed, not configurable)
# ============================================================================

THRESHOLDS: Dict[QueryCategory, Dict[str, Dict[MetricName, float]]] = {
    QueryCategory.BRAND_AND_COMPETITOR: {
        "relative": {
            MetricName.VISIBILITY: 3.0,
            MetricName.SOA: 3.0,
            MetricName.SENTIMENT: 3.0,
        },
        "absolute": {
            MetricName.VISIBILITY: 30.0,
            MetricName.SOA: 40.0,
            MetricName.SENTIMENT: 70.0,
        },
    },
    QueryCategory.BRAND_ONLY: {
        "absolute": {
            MetricName.VISIBILITY: 30.0,
            MetricName.SOA: 50.0,
            MetricName.SENTIMENT: 60.0,
        },
    },
    QueryCategory.UNBIASED: {
        "relative": {
            MetricName.VISIBILITY: 3.0,
            MetricName.SOA: 5.0,
            MetricName.SENTIMENT: 5.0,
        },
    },
}

METRIC_WEIGHTS: Dict[MetricName, float] = {
    MetricName.VISIBILITY: 1.2,   # Being seen at all matters most
    MetricName.SOA: 1.0,
    MetricName.SENTIMENT: 0.8,
}

# Severity buckets, checked top-down with strict ">"
SEVERITY_BUCKETS = [
    (20.0, Severity.CRITICAL),
    (10.0, Severity.HIGH),
    (5.0, Severity.MEDIUM),
]


def calculate_severity(gap: float) -> Severity:
    """
    Bucket a gap into a severity level.

    Args:
        gap: Unrounded gap in points

    Returns:
        Severity (gap exactly on a boundary falls into the lower bucket)
    """
    for limit, severity in SEVERITY_BUCKETS:
        if gap > limit:
            return severity
    return Severity.LOW


def calculate_priority_score(gap: float, metric: MetricName) -> float:
    """Priority = gap × metric weight, rounded to 2 decimals."""
    return round(gap * METRIC_WEIGHTS[metric], 2)


def round_one(value: float) -> float:
    return round(value, 1)


# ============================================================================
# IDENTIFIERS
# ============================================================================

_WHITESPACE_RE = re.compile(r"\s+")


def generate_opportunity_id(
    query_id: str,
    metric: MetricName,
    competitor: Optional[str] = None,
) -> str:
    """
    Build the deterministic opportunity id.

    Format: "{query_id}-{metric}" or "{query_id}-{metric}-{competitor_slug}"
    where the slug is the lowercased competitor name with whitespace runs
    replaced by underscores.
    """
    base = f"{query_id}-{metric.value}"
    if not competitor:
        return base
    slug = _WHITESPACE_RE.sub("_", competitor.strip().lower())
    return f"{base}-{slug}"


# ============================================================================
# NORMALIZATION
# ============================================================================

def normalize_visibility(raw: Optional[float]) -> Optional[float]:
    """
    Bring a visibility value onto the 0-100 scale.

    Values above 1 are treated as already in percent; values in [0, 1]
    are fractions and multiplied by 100.
    """
    if raw is None:
        return None
    value = float(raw)
    return value if value > 1 else value * 100


def clamp_metric(value: Optional[float]) -> Optional[float]:
    """Clamp a metric into [0, 100], passing None through."""
    if value is None:
        return None
    return max(0.0, min(100.0, float(value)))


# ============================================================================
# COLLECTORS
# ============================================================================

# Filter slug -> collector type names as stored with each sample
COLLECTOR_TYPE_MAP: Dict[str, List[str]] = {
    "chatgpt": ["ChatGPT"],
    "perplexity": ["Perplexity"],
    "claude": ["Claude"],
    "google_aio": ["Google AIO", "Google SGE"],
    "copilot": ["Bing Copilot", "Copilot"],
    "meta": ["Meta AI", "Llama"],
    "gemini": ["Gemini"],
    "grok": ["Grok"],
}


def resolve_collector_types(collectors: Optional[Sequence[str]]) -> Optional[List[str]]:
    """
    Map collector filter slugs to stored collector types.

    Unknown slugs pass through unchanged. Returns None when no filter
    applies.

    Args:
        collectors: Slugs such as ["chatgpt", "google_aio"]

    Returns:
        De-duplicated collector type names, or None
    """
    if not collectors:
        return None

    resolved: List[str] = []
    for slug in collectors:
        if not slug or not slug.strip():
            continue
        key = slug.strip().lower()
        for name in COLLECTOR_TYPE_MAP.get(key, [slug.strip()]):
            if name not in resolved:
                resolved.append(name)

    return resolved or None


# ============================================================================
# BRAND METADATA
# ============================================================================

def extract_aliases(metadata: Optional[Dict[str, Any]]) -> List[str]:
    """
    Read brand aliases from a metadata blob.

    Accepts "aliases" or "brand_aliases", either as a list or as a JSON
    encoded list. Blank entries are dropped.
    """
    if not metadata:
        return []

    raw = metadata.get("aliases") or metadata.get("brand_aliases")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = [raw]

    if not isinstance(raw, list):
        return []

    return [str(a).strip() for a in raw if a is not None and str(a).strip()]
