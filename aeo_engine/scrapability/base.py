"""
Scrapability Scoring Base

Shared types and helpers for the content-type scorers:

- ContentType: closed set of scorable content types (+ alias parsing)
- DimensionScore / AEOScoreResult: scorer output
- BaseScorer: computes dimensions, then clamps the total to the type max
- parse_content: flattens JSON payloads ({"sections": [...]}) to text

Every scorer is a pure function of (text, reference_year).
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple, Union


# =============================================================================
# CONTENT TYPES
# =============================================================================

class ContentType(str, Enum):
    ARTICLE = "article"
    WHITEPAPER = "whitepaper"
    VIDEO = "video"
    PODCAST = "podcast"
    SOCIAL_THREAD = "social_thread"
    COMPARISON_TABLE = "comparison_table"
    EXPERT_COMMUNITY_RESPONSE = "expert_community_response"


CONTENT_TYPE_ALIASES: Dict[str, ContentType] = {
    "blog": ContentType.ARTICLE,
    "blog_post": ContentType.ARTICLE,
    "guide": ContentType.ARTICLE,
    "white_paper": ContentType.WHITEPAPER,
    "data_driven_white_paper": ContentType.WHITEPAPER,
    "report": ContentType.WHITEPAPER,
    "video_script": ContentType.VIDEO,
    "short_form_video": ContentType.VIDEO,
    "short_form_video_script": ContentType.VIDEO,
    "podcast_script": ContentType.PODCAST,
    "social": ContentType.SOCIAL_THREAD,
    "social_media": ContentType.SOCIAL_THREAD,
    "social_media_thread": ContentType.SOCIAL_THREAD,
    "thread": ContentType.SOCIAL_THREAD,
    "comparison": ContentType.COMPARISON_TABLE,
    "technical_comparison_table": ContentType.COMPARISON_TABLE,
    "table": ContentType.COMPARISON_TABLE,
    "expert_response": ContentType.EXPERT_COMMUNITY_RESPONSE,
    "community_response": ContentType.EXPERT_COMMUNITY_RESPONSE,
    "expert_community": ContentType.EXPERT_COMMUNITY_RESPONSE,
}

_TYPE_SEPARATORS_RE = re.compile(r"[\s\-/]+")


def parse_content_type(value: Union[str, ContentType, None]) -> ContentType:
    """
    Parse a content type name, accepting common aliases.

    "comparison-table", "Expert Community Response" and "short_form_video"
    all resolve; anything unknown falls back to ARTICLE.
    """
    if isinstance(value, ContentType):
        return value
    key = _TYPE_SEPARATORS_RE.sub("_", (value or "").strip().lower()).strip("_")
    try:
        return ContentType(key)
    except ValueError:
        return CONTENT_TYPE_ALIASES.get(key, ContentType.ARTICLE)


# =============================================================================
# RESULT TYPES
# =============================================================================

class DimensionStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class DimensionScore:
    score: int
    max: int
    status: DimensionStatus
    feedback: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "max": self.max,
            "status": self.status.value,
            "feedback": self.feedback,
        }


@dataclass
class AEOScoreResult:
    """Bounded score with per-dimension diagnostics."""
    content_type: ContentType
    total_score: int
    max_score: int
    breakdown: Dict[str, DimensionScore] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content_type": self.content_type.value,
            "total_score": self.total_score,
            "max_score": self.max_score,
            "breakdown": {k: v.to_dict() for k, v in self.breakdown.items()},
        }


# =============================================================================
# CONTENT PARSING
# =============================================================================

_FENCE_START_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"\s*```$")


@dataclass
class ParsedContent:
    """Scorable text plus any structure recovered from a JSON payload."""
    text: str
    title: str = ""
    sections: List[Dict[str, Any]] = field(default_factory=list)


def parse_content(raw: Optional[str]) -> ParsedContent:
    """
    Flatten a content payload to text.

    JSON objects with a "sections" list become "## title" / content blocks;
    objects with a "content" string use that string. Anything else
    (including invalid JSON) is scored as-is.
    """
    text = raw or ""
    candidate = _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", text.strip()))
    if not candidate.startswith("{"):
        return ParsedContent(text=text)

    try:
        payload = json.loads(candidate)
    except ValueError:
        return ParsedContent(text=text)
    if not isinstance(payload, dict):
        return ParsedContent(text=text)

    title = str(payload.get("contentTitle") or payload.get("title") or "")
    sections = payload.get("sections")

    if isinstance(sections, list):
        sections = [s for s in sections if isinstance(s, dict)]
        blocks = []
        for section in sections:
            heading = str(section.get("title") or "").strip()
            body = str(section.get("content") or "").strip()
            blocks.append(f"## {heading}\n{body}" if heading else body)
        return ParsedContent(text="\n\n".join(blocks), title=title, sections=sections)

    if isinstance(payload.get("content"), str):
        return ParsedContent(text=payload["content"], title=title)

    return ParsedContent(text=text, title=title)


# =============================================================================
# PATTERN HELPERS
# =============================================================================

PatternList = Sequence[Union[str, Pattern]]


def _compile(pattern: Union[str, Pattern], flags: int = re.IGNORECASE) -> Pattern:
    if isinstance(pattern, str):
        return re.compile(pattern, flags)
    return pattern


def count_present(patterns: PatternList, text: str) -> int:
    """Number of distinct patterns that match at least once."""
    return sum(1 for p in patterns if _compile(p).search(text))


def count_occurrences(patterns: PatternList, text: str) -> int:
    """Total matches across all patterns."""
    return sum(len(_compile(p).findall(text)) for p in patterns)


def word_count(text: str) -> int:
    return len(text.split())


# (minimum value, score, status, feedback); first satisfied tier wins
Tier = Tuple[float, int, DimensionStatus, str]


def tiered(value: float, max_score: int, tiers: Sequence[Tier], fallback: Tuple[int, DimensionStatus, str]) -> DimensionScore:
    """Score a measured value against descending thresholds."""
    for minimum, score, status, feedback in tiers:
        if value >= minimum:
            return DimensionScore(score, max_score, status, feedback)
    score, status, feedback = fallback
    return DimensionScore(score, max_score, status, feedback)


def check(passed: bool, max_score: int, good: str, bad: str,
          fail_score: int = 0, fail_status: DimensionStatus = DimensionStatus.WARNING) -> DimensionScore:
    """Binary dimension."""
    if passed:
        return DimensionScore(max_score, max_score, DimensionStatus.GOOD, good)
    return DimensionScore(fail_score, max_score, fail_status, bad)


def timeliness_pattern(reference_year: int) -> Pattern:
    """Current, next or previous year, or an explicit freshness word."""
    return re.compile(
        rf"{reference_year}|{reference_year + 1}|current|updated|latest|{reference_year - 1}",
        re.IGNORECASE,
    )


# =============================================================================
# BASE SCORER
# =============================================================================

class BaseScorer(ABC):
    """
    Base class for content-type scorers.

    Subclasses implement dimensions(); penalty dimensions have max 0 and a
    non-positive score. The total is clamped to [0, MAX_SCORE].
    """

    content_type: ContentType = ContentType.ARTICLE
    MAX_SCORE: int = 70

    def score(self, raw_text: Optional[str], reference_year: Optional[int] = None) -> AEOScoreResult:
        """
        Score content.

        Args:
            raw_text: Content as text, markdown or a JSON payload
            reference_year: Year used by timeliness checks (default: today)

        Returns:
            AEOScoreResult
        """
        year = reference_year or date.today().year
        content = parse_content(raw_text)
        breakdown = self.dimensions(content, year)
        total = self.total(breakdown)
        return AEOScoreResult(
            content_type=self.content_type,
            total_score=max(0, min(self.MAX_SCORE, total)),
            max_score=self.MAX_SCORE,
            breakdown=breakdown,
        )

    def total(self, breakdown: Dict[str, DimensionScore]) -> int:
        return sum(d.score for d in breakdown.values())

    @abstractmethod
    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        """Compute every dimension for the content."""
        pass
