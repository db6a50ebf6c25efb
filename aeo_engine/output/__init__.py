"""
Output Module

Parsing of structured model output into plain Python objects.
"""

from .parser import JsonArrayParser, ParseResult, parse_json_array

__all__ = [
    "JsonArrayParser",
    "ParseResult",
    "parse_json_array",
]
