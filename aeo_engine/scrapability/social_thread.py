"""
Social Thread Scorer (max 80)

Threads are split into posts on "## Post" headings, falling back to
blank-line separated blocks longer than 20 characters.
"""

import re
from typing import Dict, List

from .base import (
    BaseScorer,
    ContentType,
    DimensionScore,
    DimensionStatus,
    ParsedContent,
    check,
    count_present,
    tiered,
    word_count,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

POST_SPLIT_RE = re.compile(r"##\s*Post", re.IGNORECASE)
HOOK_RE = re.compile("\U0001F9F5|Thread|\U0001F447|Here's how|Stop doing|My strategy", re.IGNORECASE)
DENSITY_PATTERNS = [r"\d+", r"step", r"first", r"second", r"because", r"requires"]
PROMO_RE = re.compile(r"click link|bio|subscribe|follow me", re.IGNORECASE)
DEFINITION_RE = re.compile(r"is a|refers to|defined as|means", re.IGNORECASE)
REASONING_RE = re.compile(r"vs|unlike|compared to|trade-off|however", re.IGNORECASE)
COMPLETENESS_KEYWORDS = ("why", "how", "when", "example")
TRUST_RE = re.compile(r"limitations|assumptions|constraints|fail|note", re.IGNORECASE)


def split_posts(text: str) -> List[str]:
    parts = POST_SPLIT_RE.split(text)
    if len(parts) > 1:
        return parts[1:]
    return [p for p in text.split("\n\n") if len(p) > 20]


class SocialThreadScorer(BaseScorer):

    content_type = ContentType.SOCIAL_THREAD
    MAX_SCORE = 80

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        posts = split_posts(text)
        opening = posts[0] if posts else text[:300]
        words = word_count(text)
        lowered = text.lower()

        return {
            "opening_answer": check(
                bool(HOOK_RE.search(opening)), 10,
                "Strong hook detected.", "Weak hook.", fail_score=5,
            ),
            "thread_structure": tiered(
                len(posts), 10,
                [(4, 10, GOOD, "Good thread length and segmentation."),
                 (2, 5, WARNING, "Thread is too short for deep explanation. Add more posts.")],
                (0, ERROR, "Thread structure undefined."),
            ),
            "informational_density": tiered(
                count_present(DENSITY_PATTERNS, text), 10,
                [(4, 10, GOOD, "High informational density."),
                 (2, 5, WARNING, "Moderate density. Add more specific data/steps.")],
                (0, ERROR, "Content feels fluffy. Add concrete details."),
            ),
            "language_tone": check(
                not PROMO_RE.search(text), 5,
                "Neutral, expert tone.", "Promotional language detected. Keep it neutral.",
            ),
            "llm_parsability": check(
                100 < words < 1000, 10,
                "Good overall length for parsing.", "Content is either too short or too long.",
                fail_score=5,
            ),
            "semantic_clarity": check(
                bool(DEFINITION_RE.search(text)), 5,
                "Clear semantic definitions found.", "Define key terms explicitly for better clarity.",
                fail_score=2,
            ),
            "comparative_reasoning": check(
                bool(REASONING_RE.search(text)), 10,
                "Good comparative reasoning present.", "Lack of comparison. Explain trade-offs/alternatives.",
                fail_score=3,
            ),
            "completeness": completeness(lowered, text),
            "trust": check(
                bool(TRUST_RE.search(text)), 5,
                "Honest assessment of limitations detected.", "Add limitations/constraints to build trust.",
                fail_score=2,
            ),
        }


def completeness(lowered: str, text: str) -> DimensionScore:
    """Why/how/when coverage (10) plus a closing follow-up question (5)."""
    covered = sum(1 for k in COMPLETENESS_KEYWORDS if k in lowered) >= 3
    follow_up = "?" in text[-200:]
    score = (10 if covered else 5) + (5 if follow_up else 0)
    if covered and follow_up:
        return DimensionScore(score, 15, GOOD, "Comprehensive coverage. Anticipates follow-up questions.")
    gaps = []
    if not covered:
        gaps.append("Missing key dimensions (why/how/when).")
    if not follow_up:
        gaps.append("No clear follow-up/FAQ section detected.")
    return DimensionScore(score, 15, WARNING, " ".join(gaps))
