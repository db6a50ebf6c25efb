"""
Article Scorer (max 70)

1. Primary Answer (15) - summary marker in the first quarter
2. Chunkability (10) - headings
3. Concept Clarity (10) - definition phrasing
4. Explanation Depth (10) - causal connectives
5. Comparison (10) - comparison and trade-off markers
6. Authority (15) - data points and citations
7. Anti-Marketing (penalty, up to -15)
"""

import re
from typing import Dict

from .base import (
    BaseScorer,
    ContentType,
    DimensionScore,
    DimensionStatus,
    ParsedContent,
    count_occurrences,
    count_present,
    tiered,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

SUMMARY_MARKERS = re.compile(r"TL;?DR|Summary|Key Takeaways|In short|Quick Answer", re.IGNORECASE)
HEADING_RE = re.compile(r'#{1,6}\s|class="h[1-6]"|<h[1-6]', re.IGNORECASE)

DEFINITION_PATTERNS = [
    r"is defined as", r"refers to", r"means", r"simply put", r"in simple terms", r"what is",
]
CAUSAL_PATTERNS = [
    r"because", r"due to", r"as a result", r"consequently", r"reason for", r"how does", r"why does",
]
COMPARISON_PATTERNS = [
    r" vs ", r"versus", r"unlike", r"contrary to", r"similar to", r"compared to", r"alternatively", r"trade-off",
]
AUTHORITY_PATTERNS = [
    r"\d+%", r"\$\d+", r"study", r"research", r"according to", r"\d{4}",
]
MARKETING_PATTERNS = [
    r"sign up", r"buy now", r"click here", r"subscribe", r"leading", r"best-in-class", r"revolutionary",
]


def score_primary_answer(text: str) -> DimensionScore:
    first_quarter = text[: int(len(text) * 0.25)]
    if SUMMARY_MARKERS.search(first_quarter):
        return DimensionScore(15, 15, GOOD, "Direct answer/summary found early. Excellent for AI snippets.")
    if "?" in first_quarter:
        return DimensionScore(8, 15, WARNING, "Question detected, but no explicit 'Summary' or 'TL;DR' section.")
    return DimensionScore(0, 15, ERROR, "No primary answer detected early in the content.")


def score_marketing_penalty(text: str) -> DimensionScore:
    hits = count_occurrences(MARKETING_PATTERNS, text)
    if hits >= 5:
        return DimensionScore(-15, 0, ERROR, "Tone is too promotional/marketing-heavy.")
    if hits >= 2:
        return DimensionScore(-5, 0, WARNING, "Avoid marketing calls-to-action in AEO content.")
    return DimensionScore(0, 0, GOOD, "Tone is neutral and objective.")


class ArticleScorer(BaseScorer):
    """Long-form written content. Also the fallback scorer."""

    content_type = ContentType.ARTICLE
    MAX_SCORE = 70

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text

        return {
            "primary_answer": score_primary_answer(text),
            "chunkability": tiered(
                len(HEADING_RE.findall(text)), 10,
                [(5, 10, GOOD, "Good structural depth (5+ sections)."),
                 (2, 5, WARNING, "Basic structure present, but could be more granular.")],
                (0, ERROR, "Content lacks structure (headings)."),
            ),
            "concept_clarity": tiered(
                count_present(DEFINITION_PATTERNS, text), 10,
                [(2, 10, GOOD, "Clear definitions present."),
                 (1, 6, WARNING, "Some definitions found, could be more explicit.")],
                (0, ERROR, "No clear concept definitions found."),
            ),
            "explanation_depth": tiered(
                count_present(CAUSAL_PATTERNS, text), 10,
                [(4, 10, GOOD, "Deep explanation logic detected."),
                 (2, 5, WARNING, "Some explanation logic, but explain 'why' more.")],
                (0, ERROR, "Content is descriptive only, missing 'why' and 'how'."),
            ),
            "comparison": tiered(
                count_present(COMPARISON_PATTERNS, text), 10,
                [(3, 10, GOOD, "Strong comparative signals."),
                 (1, 5, WARNING, "Minimal comparisons found. Consider adding trade-offs.")],
                (0, ERROR, "No comparisons or trade-offs found."),
            ),
            "authority": tiered(
                count_present(AUTHORITY_PATTERNS, text), 15,
                [(4, 15, GOOD, "High density of authority signals (data/citations)."),
                 (2, 8, WARNING, "Some data present, but could be more specific.")],
                (0, ERROR, "Lacks specific data points or citations."),
            ),
            "anti_marketing": score_marketing_penalty(text),
        }
