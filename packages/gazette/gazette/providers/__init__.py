"""
Gazette - Providers

LLM backends that turn the digest prompt into text.
"""

from typing import Dict

from gazette.config import Config

from .base import BaseProvider, ProviderError, ProviderResponse
from .openai import OpenAIProvider, extract_output_text


# Registry of available providers
PROVIDERS: Dict[str, type] = {
    "openai": OpenAIProvider,
}


def create_provider(config: Config, name: str = "openai") -> BaseProvider:
    """
    Build the provider named *name* from the run configuration.

    Raises:
        ValueError: If provider type is unknown
    """
    if name not in PROVIDERS:
        available = ", ".join(PROVIDERS.keys())
        raise ValueError(f"Unknown provider: {name}. Available providers: {available}")

    return PROVIDERS[name](
        api_key=config.openai_api_key,
        model_name=config.openai_model,
        reasoning_effort=config.reasoning_effort,
        web_search=config.web_search,
        timeout_s=config.llm_timeout_s,
        api_base=config.openai_api_base,
    )


__all__ = [
    "BaseProvider",
    "ProviderError",
    "ProviderResponse",
    "OpenAIProvider",
    "extract_output_text",
    "create_provider",
    "PROVIDERS",
]
