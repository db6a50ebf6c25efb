"""
Generative-text client used for domain context and recommendation drafting.
"""

from .client import ClaudeClient, GenerativeTextClient, GenerationResponse, TokenUsage

__all__ = [
    "ClaudeClient",
    "GenerativeTextClient",
    "GenerationResponse",
    "TokenUsage",
]
