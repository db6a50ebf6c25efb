"""
Whitepaper Scorer (max 70)

High-authority, data-driven long-form content. Stricter data thresholds
than articles and a required executive summary.
"""

import re
from typing import Dict

from .base import (
    BaseScorer,
    ContentType,
    DimensionScore,
    DimensionStatus,
    ParsedContent,
    check,
    count_occurrences,
    count_present,
    tiered,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

SUMMARY_PATTERNS = [r"executive summary", r"key findings", r"abstract", r"management summary", r"overview"]
BULLET_LINE_RE = re.compile(r"^\s*[-*•]", re.MULTILINE)
H2_RE = re.compile(r'#{2}\s|class="h2"|<h2', re.IGNORECASE)
H3_RE = re.compile(r'#{3}\s|class="h3"|<h3', re.IGNORECASE)
DATA_RE = re.compile(r"\d+%|\$\d+|study|survey|report|data|\[\d+\]", re.IGNORECASE)
METHODOLOGY_PATTERNS = [r"methodology", r"we analyzed", r"our approach", r"data sources", r"participants"]
EXPERTISE_RE = re.compile(r"expert|author", re.IGNORECASE)
PROBLEM_PATTERNS = [r"problem", r"challenge", r"pain point", r"landscape", r"current state"]
SALES_PATTERNS = [r"sign up", r"buy now", r"limited time", r"subscribe", r"book a demo", r"contact sales"]


def score_executive_summary(text: str) -> DimensionScore:
    first_part = text[: int(len(text) * 0.3)]
    if count_present(SUMMARY_PATTERNS, first_part):
        return DimensionScore(20, 20, GOOD, "Executive summary detected.")
    if len(BULLET_LINE_RE.findall(first_part)) > 2:
        return DimensionScore(10, 20, WARNING, "Bullet points found early, but an explicit 'Executive Summary' is better.")
    return DimensionScore(0, 20, ERROR, "No 'Executive Summary' found. Essential for whitepapers.")


def score_structural_depth(h2_count: int, h3_count: int) -> DimensionScore:
    # Six or more top-level sections count as depth even without H3s
    if h2_count >= 4 and (h3_count >= 2 or h2_count >= 6):
        return DimensionScore(10, 10, GOOD, "Deep, well-structured hierarchy.")
    if h2_count >= 3:
        return DimensionScore(5, 10, WARNING, "Basic structure present. Add H3 subsections for granular AEO.")
    return DimensionScore(0, 10, ERROR, "Structure is flat. Use H2 and H3 for hierarchy.")


class WhitepaperScorer(BaseScorer):

    content_type = ContentType.WHITEPAPER
    MAX_SCORE = 70

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        h2_count = len(content.sections) or len(H2_RE.findall(text))
        h3_count = len(H3_RE.findall(text))

        if count_present(METHODOLOGY_PATTERNS, text):
            methodology = DimensionScore(10, 10, GOOD, "Methodology/approach referenced.")
        elif EXPERTISE_RE.search(text):
            methodology = DimensionScore(5, 10, WARNING, "Expertise mentioned, but an explicit 'Methodology' section is preferred.")
        else:
            methodology = DimensionScore(0, 10, ERROR, "No methodology signal detected.")

        sales_hits = count_occurrences(SALES_PATTERNS, text)
        if sales_hits >= 3:
            penalty = DimensionScore(-10, 0, ERROR, "Too many sales CTAs (book a demo, sign up). Remove for AEO.")
        else:
            penalty = DimensionScore(0, 0, GOOD, "Tone is professional.")

        return {
            "executive_summary": score_executive_summary(text),
            "structural_depth": score_structural_depth(h2_count, h3_count),
            "data_density": tiered(
                len(DATA_RE.findall(text)), 20,
                [(10, 20, GOOD, "High data density. Excellent for authority."),
                 (5, 10, WARNING, "Some data present. Add more specific stats.")],
                (0, ERROR, "Lacks data density. Whitepapers need stats and citations."),
            ),
            "methodology": methodology,
            "problem_definition": check(
                count_present(PROBLEM_PATTERNS, text) > 0, 10,
                "Clear problem/landscape definition.",
                "Define the 'Challenge' or 'Problem' space explicitly.",
            ),
            "anti_marketing": penalty,
        }
