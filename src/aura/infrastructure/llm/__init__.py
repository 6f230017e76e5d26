"""LLM provider abstraction package."""

from aura.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from aura.infrastructure.llm.provider_factory import LLMProviderType, create_llm_provider

__all__ = [
    # Base types
    "LLMProvider",
    "LLMResponse",
    "LLMProviderError",
    "RateLimitError",
    "ContentFilterError",
    # Factory
    "LLMProviderType",
    "create_llm_provider",
]
