"""
Expert Community Response Scorer (max 105 = 100 + 5 bonus)

Targets Reddit / Quora / StackOverflow style answers: first-hand
experience, an early direct answer and a neutral tone.
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
    count_present,
    tiered,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

RELEVANCE_PATTERNS = [
    r"to answer", r"regarding", r"the issue is", r"you asked",
    r"your question", r"specifically", r"in this case",
]
SENTENCE_RE = re.compile(r"[^.!?]+[.!?]")
DIRECT_RE = re.compile(r"\b(?:yes|no|it depends|do this|don't|start by|the best way|my recommendation)\b", re.IGNORECASE)
HEDGING_RE = re.compile(r"maybe|i guess|possibly|might", re.IGNORECASE)
EXPERTISE_PATTERNS = [
    r"I (?:have|used|tested|managed|built|run)",
    r"in my (?:experience|view|opinion)",
    r"we (?:found|discovered|saw)",
    r"years of",
    r"personally",
    r"my team",
]
PARAGRAPH_RE = re.compile(r"\n\s*\n")
PROMO_RE = re.compile(r"buy|sign up|check out|best|amazing|revolutionary", re.IGNORECASE)
DEFENSIVE_RE = re.compile(r"you are wrong|actually|clearly", re.IGNORECASE)
REASONING_PATTERNS = [r"because", r"due to", r"therefore", r"however", r"on the other hand", r"depends on"]
SHOUTING_RE = re.compile(r"[A-Z]{4,}")
EMOJI_RE = re.compile("[\U0001F600-\U0001F64F]")
FOLLOW_UP_PATTERNS = [r"also", r"note that", r"keep in mind", r"alternatively", r"if you"]
REFERENCE_RE = re.compile(r"http|www\.|source:|according to|reference", re.IGNORECASE)


def score_early_answer(text: str) -> DimensionScore:
    sentences = SENTENCE_RE.findall(text) or [text]
    first_block = " ".join(sentences[:6])
    if DIRECT_RE.search(first_block):
        return DimensionScore(15, 15, GOOD, "Strong early answer signal.")
    if HEDGING_RE.search(first_block):
        return DimensionScore(5, 15, ERROR, "Hedging language ('maybe', 'I guess') undermines early trust.")
    return DimensionScore(8, 15, WARNING, "Opening is neutral. Be more declarative.")


def score_density(text: str) -> DimensionScore:
    paragraphs = len(PARAGRAPH_RE.split(text))
    words_per_paragraph = len(text.split()) / max(paragraphs, 1)

    if words_per_paragraph > 150:
        return DimensionScore(5, 15, ERROR, "Paragraphs are too long. Break them up for scanning.")
    if paragraphs >= 3:
        return DimensionScore(15, 15, GOOD, "Good information chunking.")
    if paragraphs >= 2:
        return DimensionScore(10, 15, WARNING, "Acceptable density.")
    return DimensionScore(0, 15, ERROR, "Structure is weak (wall of text).")


def score_tone(text: str) -> DimensionScore:
    if PROMO_RE.search(text):
        return DimensionScore(0, 10, ERROR, "Tone is too promotional.")
    if DEFENSIVE_RE.search(text):
        return DimensionScore(5, 10, WARNING, "Tone sounds defensive or condescending.")
    return DimensionScore(10, 10, GOOD, "Tone is neutral and helpful.")


class ExpertResponseScorer(BaseScorer):

    content_type = ContentType.EXPERT_COMMUNITY_RESPONSE
    MAX_SCORE = 105

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        noisy = len(SHOUTING_RE.findall(text)) > 2 or len(EMOJI_RE.findall(text)) > 3

        return {
            "question_relevance": tiered(
                count_present(RELEVANCE_PATTERNS, text), 15,
                [(2, 15, GOOD, "Directly addresses the user context."),
                 (1, 10, GOOD, "References the question context.")],
                (5, WARNING, "Restate or reference the specific user question."),
            ),
            "early_answer": score_early_answer(text),
            "experience_signals": tiered(
                count_present(EXPERTISE_PATTERNS, text), 15,
                [(3, 15, GOOD, "Excellent first-hand expertise signals."),
                 (1, 8, WARNING, "Some first-hand signals, but could be stronger.")],
                (0, ERROR, "Reads like generic advice. Use 'I' and 'in my experience'."),
            ),
            "informational_density": score_density(text),
            "tone_trust": score_tone(text),
            "contextual_reasoning": tiered(
                count_present(REASONING_PATTERNS, text), 10,
                [(3, 10, GOOD, "Strong contextual reasoning."),
                 (1, 5, WARNING, "Minimal reasoning found.")],
                (0, ERROR, "Lacks 'why' logic. Explain your reasoning."),
            ),
            "semantic_clarity": check(
                not noisy, 10,
                "Clean terminology.", "Reduce caps lock or emojis for authority.",
                fail_score=5,
            ),
            "follow_up_readiness": check(
                count_present(FOLLOW_UP_PATTERNS, text) >= 2, 10,
                "Proactively addresses potential follow-ups.",
                "Could anticipate next steps/questions better.",
                fail_score=5,
            ),
            "verifiability": check(
                bool(REFERENCE_RE.search(text)), 5,
                "Includes external verification/links.", "No specific references found (bonus).",
            ),
        }
