"""
Podcast Script Scorer (max 70)

Conversational audio: an up-front summary, clear speaker turns, expert
signals, segments and a closing recap make transcripts extractable.
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

INTRO_RE = re.compile(
    r"in this episode|today we|we'll cover|we will cover|quick answer|summary|key takeaways",
    re.IGNORECASE,
)
SPEAKER_RE = re.compile(r"^\s*(?:\*\*)?(?:host|guest|speaker\s*\d*|interviewer|[A-Z][a-z]+)(?:\*\*)?\s*:", re.MULTILINE)
DEPTH_PATTERNS = [r"because", r"for example", r"that's why", r"the reason", r"how does", r"why does"]
EXPERT_PATTERNS = [r"in my experience", r"we found", r"research", r"study", r"according to", r"\d+%", r"years of"]
SEGMENT_PATTERNS = [r"segment", r"chapter", r"\b\d{1,2}:\d{2}\b", r"part \d", r"next up"]
RECAP_RE = re.compile(r"to recap|in summary|key takeaway|to sum up|wrapping up", re.IGNORECASE)
PROMO_PATTERNS = [r"sponsor", r"promo code", r"use code", r"sign up", r"subscribe"]


class PodcastScorer(BaseScorer):

    content_type = ContentType.PODCAST
    MAX_SCORE = 70

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        first_quarter = text[: int(len(text) * 0.25)]
        last_quarter = text[int(len(text) * 0.75):]

        if INTRO_RE.search(first_quarter):
            intro = DimensionScore(15, 15, GOOD, "Episode opens with a summary of the answer.")
        elif "?" in first_quarter:
            intro = DimensionScore(8, 15, WARNING, "Opening poses the question but does not summarize the answer.")
        else:
            intro = DimensionScore(0, 15, ERROR, "No up-front summary. State the answer in the first minute.")

        promo = count_occurrences(PROMO_PATTERNS, text)
        if promo >= 4:
            penalty = DimensionScore(-10, 0, ERROR, "Ad reads dominate the transcript.")
        elif promo >= 2:
            penalty = DimensionScore(-5, 0, WARNING, "Keep sponsor reads out of the answer segments.")
        else:
            penalty = DimensionScore(0, 0, GOOD, "Promotional content is minimal.")

        return {
            "intro_summary": intro,
            "speaker_structure": tiered(
                len(SPEAKER_RE.findall(text)), 10,
                [(4, 10, GOOD, "Clear speaker turns."),
                 (2, 5, WARNING, "Some speaker labels. Label every turn.")],
                (0, ERROR, "No speaker labels. Transcripts need attributed turns."),
            ),
            "conversational_depth": tiered(
                count_present(DEPTH_PATTERNS, text), 10,
                [(3, 10, GOOD, "Explains the why with examples."),
                 (1, 5, WARNING, "Some explanation. Add concrete examples.")],
                (0, ERROR, "Conversation stays on the surface."),
            ),
            "expert_signals": tiered(
                count_present(EXPERT_PATTERNS, text), 15,
                [(3, 15, GOOD, "Strong expertise and data signals."),
                 (1, 8, WARNING, "Some expertise signals. Cite data or experience.")],
                (0, ERROR, "No first-hand experience or data."),
            ),
            "segmentation": tiered(
                count_present(SEGMENT_PATTERNS, text), 10,
                [(3, 10, GOOD, "Segmented with chapters or timestamps."),
                 (1, 5, WARNING, "Light segmentation. Add chapter markers.")],
                (0, ERROR, "No segments or timestamps."),
            ),
            "recap": check(
                bool(RECAP_RE.search(last_quarter)), 10,
                "Closes with a recap.", "Add a closing recap of the key points.",
            ),
            "anti_marketing": penalty,
        }
