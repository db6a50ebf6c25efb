"""
Comparison Table Scorer (max 70)

Dimensions sum to 100, plus a 5-point extraction bonus; the raw sum is
scaled by 0.7 before the bonus is added:

    total = min(70, round(raw * 0.7) + llm_readiness)
"""

import math
import re
from typing import Dict, List, Optional

from .base import (
    BaseScorer,
    ContentType,
    DimensionScore,
    DimensionStatus,
    ParsedContent,
    check,
    count_present,
    tiered,
    timeliness_pattern,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

INTENT_RE = re.compile(r" vs\.? |versus|comparison|comparing|showdown|side-by-side|table", re.IGNORECASE)
TABLE_ROW_RE = re.compile(r"^\s*\|.*\|\s*$", re.MULTILINE)
SEPARATOR_RE = re.compile(r"^\s*\|[-:\s|]+\|\s*$", re.MULTILINE)
ATTRIBUTE_PATTERNS = [
    r"price", r"cost", r"feature", r"support", r"platform", r"user",
    r"rating", r"limit", r"security", r"compliance", r"granular",
]
HYPE_RE = re.compile(r"absolute winner|destroyed|crushes the competition", re.IGNORECASE)
EDGE_CASE_PATTERNS = [r"except", r"however", r"trade-off", r"limitation", r"only if", r"unless", r"gap", r"lack"]

SCALE = 0.7


def _find_table_section(sections: List[dict]) -> Optional[dict]:
    for section in sections:
        title = str(section.get("title") or "").lower()
        if section.get("sectionType") == "comparison_table" or section.get("id") == "table" or "table" in title:
            return section
    return None


def score_comparison_intent(text: str) -> DimensionScore:
    header = text.strip().split("\n")[0].strip() if text.strip() else ""
    if INTENT_RE.search(header):
        return DimensionScore(10, 10, GOOD, "Clear comparison intent in header.")
    return DimensionScore(5, 10, WARNING, "Header is vague. Use 'A vs B' format.")


def score_table_structure(table_text: str) -> DimensionScore:
    rows = TABLE_ROW_RE.findall(table_text)
    if len(rows) >= 3 and SEPARATOR_RE.search(table_text):
        return DimensionScore(20, 20, GOOD, "Strong table structure.")
    if rows:
        return DimensionScore(10, 20, WARNING, "Structure exists but is thin (add more rows).")
    return DimensionScore(0, 20, ERROR, "No markdown table structure detected.")


def score_semantic_consistency(table_text: str) -> DimensionScore:
    rows = TABLE_ROW_RE.findall(table_text)
    if not rows:
        return DimensionScore(0, 10, ERROR, "No table rows.")
    pipe_counts = {row.count("|") for row in rows}
    if len(pipe_counts) == 1 and len(rows) > 2:
        return DimensionScore(10, 10, GOOD, "Consistent table formatting.")
    return DimensionScore(5, 10, WARNING, "Inconsistent column counts detected.")


class ComparisonTableScorer(BaseScorer):

    content_type = ContentType.COMPARISON_TABLE
    MAX_SCORE = 70

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        table_text = text
        if content.sections:
            section = _find_table_section(content.sections)
            if section is not None:
                table_text = str(section.get("content") or "")

        structure = score_table_structure(table_text)
        non_table = TABLE_ROW_RE.sub("", text).strip()

        return {
            "comparison_intent": score_comparison_intent(content.title or text),
            "table_structure": structure,
            "attribute_quality": tiered(
                count_present(ATTRIBUTE_PATTERNS, table_text), 20,
                [(3, 20, GOOD, "High quality, functional attributes."),
                 (1, 10, WARNING, "Basic attributes. Add a deeper functional comparison.")],
                (5, ERROR, "Attributes seem weak or missing functional details."),
            ),
            "neutral_factuality": check(
                not HYPE_RE.search(text), 15,
                "Neutral comparison tone.",
                "Avoid 'winner' language in AEO comparisons.",
                fail_score=5,
            ),
            "semantic_consistency": score_semantic_consistency(table_text),
            "contextual_interpretation": check(
                len(non_table) > 150, 10,
                "Good contextual analysis surrounding the table.",
                "Add analysis text before/after the table.",
                fail_score=2,
            ),
            "edge_case_coverage": check(
                count_present(EDGE_CASE_PATTERNS, text) >= 2, 10,
                "Explicitly covers edge cases/limitations.",
                "Missing edge-case/trade-off analysis.",
            ),
            "timeliness": check(
                bool(timeliness_pattern(reference_year).search(text)), 5,
                "Includes timeliness signals.",
                "Add a date or 'current as of' signal.",
            ),
            "llm_readiness": check(
                structure.score >= 15, 5,
                "Perfectly parsable structure.",
                "Structure errors may hinder LLM extraction.",
            ),
        }

    def total(self, breakdown: Dict[str, DimensionScore]) -> int:
        bonus = breakdown["llm_readiness"].score
        raw = sum(d.score for name, d in breakdown.items() if name != "llm_readiness")
        # Half-up rounding
        return int(math.floor(raw * SCALE + 0.5)) + bonus
