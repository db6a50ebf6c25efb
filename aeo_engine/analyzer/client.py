"""
Claude Client for Domain Context and Recommendation Drafting

Both generative steps ask for a JSON array of objects. The client sends
one message, accumulates token usage across calls and hands the text to
JsonArrayParser. There are no retries: a failed call is terminal for the
operation that made it.
"""

import os
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

import anthropic

from ..errors import GenerativeTextError
from ..output.parser import JsonArrayParser
from ..utils.config import get_settings

logger = logging.getLogger(__name__)

# USD per million tokens (input, output)
MODEL_PRICING = {
    "sonnet": (3.0, 15.0),
    "opus": (15.0, 75.0),
    "haiku": (0.8, 4.0),
}


@dataclass
class TokenUsage:
    """Token counts for one call or a running total."""
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = "sonnet"

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        input_price, output_price = MODEL_PRICING["sonnet"]
        for family, prices in MODEL_PRICING.items():
            if family in self.model:
                input_price, output_price = prices
                break
        return (self.input_tokens * input_price + self.output_tokens * output_price) / 1_000_000

    def add(self, other: "TokenUsage") -> None:
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens


@dataclass
class GenerationResponse:
    """Text and usage from one Claude call."""
    content: str
    usage: TokenUsage
    model: str
    stop_reason: str
    success: bool = True
    error: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_tokens"


class GenerativeTextClient(ABC):
    """Capability: system + prompt in, JSON array of objects out."""

    @abstractmethod
    async def generate_json_array(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Generate and parse a JSON array.

        Returns:
            Parsed objects (possibly empty if the output was unusable)

        Raises:
            GenerativeTextError: if the service call failed
        """
        pass


class ClaudeClient(GenerativeTextClient):
    """
    GenerativeTextClient backed by the Anthropic Messages API.

    Usage:
        client = ClaudeClient()
        items = await client.generate_json_array(prompt, system=system)
        print(client.total_usage.estimated_cost)
    """

    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.ANTHROPIC_API_KEY or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or settings.CLAUDE_MODEL
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self.async_client = anthropic.AsyncAnthropic(api_key=self.api_key)
        self.parser = JsonArrayParser()

        self.total_usage = TokenUsage(model=self.model)
        self.call_count = 0

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: float = TEMPERATURE,
    ) -> GenerationResponse:
        """
        Send one user message.

        API errors are logged and returned as an unsuccessful response.
        """
        request: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        try:
            message = await self.async_client.messages.create(**request)
        except anthropic.APIError as e:
            logger.error(f"Claude API error ({self.model}): {e}")
            return GenerationResponse(
                content="",
                usage=TokenUsage(model=self.model),
                model=self.model,
                stop_reason="error",
                success=False,
                error=str(e),
            )

        text = "".join(getattr(block, "text", "") for block in message.content)
        usage = TokenUsage(
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
            model=self.model,
        )
        self.total_usage.add(usage)
        self.call_count += 1

        logger.info(
            f"Claude call #{self.call_count}: {usage.input_tokens} in, "
            f"{usage.output_tokens} out, ${usage.estimated_cost:.4f}"
        )
        return GenerationResponse(
            content=text,
            usage=usage,
            model=self.model,
            stop_reason=message.stop_reason,
        )

    async def generate_json_array(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        response = await self.generate(prompt, system=system, max_tokens=max_tokens)
        if not response.success:
            raise GenerativeTextError(response.error or "Claude call failed")

        if response.truncated:
            logger.warning("Claude output hit max_tokens; recovering complete objects only")

        result = self.parser.parse(response.content)
        if not result.success:
            logger.warning(f"No usable JSON in Claude output: {'; '.join(result.errors)}")
        return result.items
