"""
Gazette - Base Provider

Abstract interface for the LLM that writes the digest.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """The LLM API call failed (HTTP status or transport)."""


@dataclass
class ProviderResponse:
    """Response from a model provider."""
    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str = "stop"
    metadata: Optional[Dict[str, Any]] = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class BaseProvider(ABC):
    """
    Base interface for digest providers.

    Subclasses implement _call_api() and cost_per_token(); callers only
    use complete().
    """

    def __init__(self, model_name: str):
        self.model_name = model_name

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider name (openai, ...)."""

    @abstractmethod
    async def _call_api(self, messages: List[Dict[str, str]]) -> ProviderResponse:
        """
        Make the actual API call.

        Args:
            messages: Role-tagged messages, e.g.
                [{"role": "system", "content": "..."},
                 {"role": "user", "content": "..."}]

        Returns:
            ProviderResponse with content and token usage
        """

    @abstractmethod
    def cost_per_token(self) -> tuple[float, float]:
        """Return (input_cost, output_cost) in dollars per million tokens."""

    async def complete(self, system_prompt: str, user_prompt: str) -> ProviderResponse:
        """Send a system + user prompt pair and return the generated text."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = await self._call_api(messages)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"{self.provider_name} API error: {e}") from e

        log.info(
            "%s/%s responded: %d chars, tokens in=%d out=%d (~$%.4f)",
            self.provider_name, response.model, len(response.content),
            response.input_tokens, response.output_tokens,
            self.calculate_cost(response.input_tokens, response.output_tokens),
        )
        return response

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Calculate cost for token usage."""
        input_cost_per_m, output_cost_per_m = self.cost_per_token()
        return (
            (input_tokens / 1_000_000 * input_cost_per_m) +
            (output_tokens / 1_000_000 * output_cost_per_m)
        )
