"""
Gazette - OpenAI Provider

Calls the OpenAI Responses API, which can browse the listed sources
through the built-in web_search tool.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .base import BaseProvider, ProviderError, ProviderResponse


class OpenAIProvider(BaseProvider):
    """
    Provider for OpenAI reasoning models via /v1/responses.

    Environment example:
    ```
    OPENAI_API_KEY=sk-...
    OPENAI_MODEL=gpt-5.1
    OPENAI_REASONING_EFFORT=high
    OPENAI_WEB_SEARCH=1
    ```
    """

    API_BASE = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-5.1",
        reasoning_effort: str = "high",
        web_search: bool = True,
        timeout_s: float = 600.0,
        api_base: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(model_name)
        if not api_key:
            raise ValueError("OpenAI API key is required")
        self.api_key = api_key
        self.reasoning_effort = reasoning_effort
        self.web_search = web_search
        self.timeout_s = timeout_s
        self.api_base = (api_base or self.API_BASE).rstrip("/")
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "openai"

    def build_payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "reasoning": {"effort": self.reasoning_effort},
            "input": messages,
        }
        if self.web_search:
            payload["tools"] = [{"type": "web_search"}]
            payload["tool_choice"] = "auto"
        return payload

    async def _call_api(self, messages: List[Dict[str, str]]) -> ProviderResponse:
        """Make API call to OpenAI."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.api_base}/responses",
                    json=self.build_payload(messages),
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"openai returned HTTP {e.response.status_code}: {e.response.text[:300]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"openai request failed: {e}") from e

        usage = data.get("usage") or {}
        return ProviderResponse(
            content=extract_output_text(data),
            model=data.get("model", self.model_name),
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
            finish_reason=data.get("status", "completed"),
            metadata={"id": data.get("id")},
        )

    def cost_per_token(self) -> tuple[float, float]:
        """
        OpenAI pricing (approximate, per million tokens):

        GPT-5.x:      $1.25 input,  $10 output
        GPT-5 mini:   $0.25 input,  $2 output
        GPT-4.1:      $2 input,     $8 output

        Web search tool calls are billed separately and not counted here.
        """
        model = self.model_name.lower()

        if "mini" in model:
            return (0.25, 2.0)
        elif model.startswith("gpt-5"):
            return (1.25, 10.0)
        elif model.startswith("gpt-4.1"):
            return (2.0, 8.0)
        else:
            return (1.25, 10.0)


def extract_output_text(data: Dict[str, Any]) -> str:
    """Pull the generated text out of a Responses API payload ("" if none)."""
    text = data.get("output_text")
    if isinstance(text, str):
        return text

    parts: List[str] = []
    for item in data.get("output") or []:
        if item.get("type") != "message":
            continue
        for content in item.get("content") or []:
            if content.get("type") == "output_text":
                parts.append(content.get("text", ""))
    return "".join(parts)
