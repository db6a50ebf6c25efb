"""
Short-form Video Script Scorer (max 70)

1. Hook (15) - question or hook phrase in the opening
2. Scene Structure (10) - scene/shot/timestamp markers
3. Spoken Answer (15) - the answer is said out loud, plainly
4. Visual Cues (10) - on-screen text and b-roll directions
5. Brevity (10) - speakable length
6. Specificity (10) - numbers, steps, sources
7. Anti-Marketing (penalty, up to -10)
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
    word_count,
)

GOOD, WARNING, ERROR = DimensionStatus.GOOD, DimensionStatus.WARNING, DimensionStatus.ERROR

HOOK_RE = re.compile(r"\?|did you know|here's|stop|quick answer|in \d+ seconds", re.IGNORECASE)
SCENE_RE = re.compile(
    r"\[(?:scene|shot|b-roll|cut|visual|on-screen)|scene \d+|\(\d{1,2}:\d{2}\)|^\s*\d{1,2}:\d{2}|^\s*\d+s\s*[-:]",
    re.IGNORECASE | re.MULTILINE,
)
ANSWER_PATTERNS = [r"the answer is", r"simply put", r"here's how", r"means", r"refers to", r"the short version"]
VISUAL_PATTERNS = [r"on-screen", r"text overlay", r"caption", r"b-roll", r"graphic", r"close-up", r"screen recording", r"demo"]
SPECIFIC_PATTERNS = [r"\d+%", r"\d+", r"step", r"according to", r"because"]
MARKETING_PATTERNS = [r"link in bio", r"buy now", r"sign up", r"use code", r"limited time", r"smash that"]


class VideoScorer(BaseScorer):

    content_type = ContentType.VIDEO
    MAX_SCORE = 70

    def dimensions(self, content: ParsedContent, reference_year: int) -> Dict[str, DimensionScore]:
        text = content.text
        opening = text[:200]
        words = word_count(text)

        if 60 <= words <= 400:
            brevity = DimensionScore(10, 10, GOOD, "Script length fits a short-form video.")
        elif 0 < words <= 600:
            brevity = DimensionScore(5, 10, WARNING, "Script is short or long for the format. Aim for 60-400 words.")
        else:
            brevity = DimensionScore(0, 10, ERROR, "Script length does not fit a short-form video.")

        marketing = count_occurrences(MARKETING_PATTERNS, text)
        if marketing >= 3:
            penalty = DimensionScore(-10, 0, ERROR, "Too many sales calls-to-action for an answer video.")
        elif marketing >= 1:
            penalty = DimensionScore(-3, 0, WARNING, "Keep calls-to-action out of the answer itself.")
        else:
            penalty = DimensionScore(0, 0, GOOD, "No promotional calls-to-action.")

        return {
            "hook": check(
                bool(HOOK_RE.search(opening)), 15,
                "Opens with a hook or the viewer's question.",
                "No hook in the first seconds. Lead with the question or the answer.",
                fail_status=ERROR,
            ),
            "scene_structure": tiered(
                len(SCENE_RE.findall(text)), 10,
                [(4, 10, GOOD, "Clear scene-by-scene structure."),
                 (2, 5, WARNING, "Some scene markers. Mark every beat.")],
                (0, ERROR, "No scene, shot or timestamp markers."),
            ),
            "spoken_answer": tiered(
                count_present(ANSWER_PATTERNS, text), 15,
                [(2, 15, GOOD, "Answer is stated plainly in the narration."),
                 (1, 8, WARNING, "Answer is implied. Say it explicitly.")],
                (0, ERROR, "Narration never states a direct answer."),
            ),
            "visual_cues": tiered(
                count_present(VISUAL_PATTERNS, text), 10,
                [(3, 10, GOOD, "Rich visual direction (overlays, b-roll, captions)."),
                 (1, 5, WARNING, "Few visual cues. Add on-screen text for key facts.")],
                (0, ERROR, "No visual direction. Answer engines read captions and overlays."),
            ),
            "brevity": brevity,
            "specificity": tiered(
                count_present(SPECIFIC_PATTERNS, text), 10,
                [(3, 10, GOOD, "Concrete numbers and steps."),
                 (1, 5, WARNING, "Add specific numbers or steps.")],
                (0, ERROR, "Script is vague."),
            ),
            "anti_marketing": penalty,
        }
