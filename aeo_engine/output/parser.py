"""
Output Parser for LLM JSON Responses

Recovers a JSON array of objects from model output, in order:
1. Direct parse of the (unfenced) array
2. Parse after repairing trailing commas and doubled braces
3. Object-by-object extraction of flat {...} blocks

Handles graceful degradation: unparseable output yields an empty list.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_FLAT_OBJECT_RE = re.compile(r"\{[^{}]*\}")


@dataclass
class ParseResult:
    """Result of parsing one model response."""
    success: bool
    items: List[Dict[str, Any]]
    parse_method: str  # "direct", "repaired", "objects", "none"
    errors: List[str] = field(default_factory=list)


class JsonArrayParser:
    """
    Parses a JSON array of objects out of free-form model output.

    Non-object array members are dropped.
    """

    def parse(self, raw_output: str) -> ParseResult:
        """
        Parse raw model output.

        Args:
            raw_output: Raw text from the model

        Returns:
            ParseResult with the recovered objects
        """
        if not raw_output or not raw_output.strip():
            return ParseResult(False, [], "none", ["Empty response"])

        text = _FENCE_RE.sub("", raw_output).strip()
        match = _ARRAY_RE.search(text)
        candidate = match.group(0) if match else text

        methods = [
            ("direct", self._parse_direct),
            ("repaired", self._parse_repaired),
            ("objects", self._parse_objects),
        ]

        errors = []
        for method_name, parser_fn in methods:
            try:
                items = parser_fn(candidate)
            except ValueError as e:
                errors.append(f"{method_name}: {e}")
                logger.debug(f"{method_name} parsing failed: {e}")
                continue
            if items:
                logger.debug(f"Parsed {len(items)} items with {method_name}")
                return ParseResult(True, items, method_name, errors)

        logger.warning("Could not recover any JSON objects from model output")
        return ParseResult(False, [], "none", errors or ["No JSON objects found"])

    # =========================================================================
    # STRATEGIES
    # =========================================================================

    def _parse_direct(self, text: str) -> List[Dict[str, Any]]:
        return self._objects_only(json.loads(text))

    def _parse_repaired(self, text: str) -> List[Dict[str, Any]]:
        repaired = _TRAILING_COMMA_RE.sub(r"\1", text)
        repaired = repaired.replace("{{", "{").replace("}}", "}")
        return self._objects_only(json.loads(repaired))

    def _parse_objects(self, text: str) -> List[Dict[str, Any]]:
        items = []
        for block in _FLAT_OBJECT_RE.findall(text):
            block = _TRAILING_COMMA_RE.sub(r"\1", block)
            try:
                value = json.loads(block)
            except ValueError:
                continue
            if isinstance(value, dict):
                items.append(value)
        return items

    @staticmethod
    def _objects_only(value: Any) -> List[Dict[str, Any]]:
        if isinstance(value, dict):
            return [value]
        if not isinstance(value, list):
            raise ValueError(f"Expected JSON array, got {type(value).__name__}")
        return [item for item in value if isinstance(item, dict)]


def parse_json_array(raw_output: str) -> List[Dict[str, Any]]:
    """Convenience wrapper returning only the recovered objects."""
    return JsonArrayParser().parse(raw_output).items
