"""
LLM Provider Factory

Creates the generative provider named by configuration.

CONFIGURATION:
    AURA_LLM_PRIMARY_PROVIDER=gemini  # or: openai
"""

from enum import StrEnum
from typing import Optional

from aura.config.logging_config import get_logger
from aura.config.settings import Settings
from aura.infrastructure.llm.provider import LLMProvider

logger = get_logger(__name__)


class LLMProviderType(StrEnum):
    """Supported LLM provider types."""

    OPENAI = "openai"
    GEMINI = "gemini"


def create_llm_provider(
    settings: Settings,
    provider_type: Optional[LLMProviderType] = None,
) -> LLMProvider:
    """
    Build the configured LLM provider.

    Args:
        settings: Application settings
        provider_type: Override the configured provider

    Returns:
        Provider instance (possibly unconfigured)

    Raises:
        ValueError: If the provider type is unknown
    """
    if provider_type is None:
        provider_type = LLMProviderType(settings.llm_primary_provider)

    if provider_type == LLMProviderType.OPENAI:
        from aura.infrastructure.llm.openai_provider import OpenAIProvider
        provider: LLMProvider = OpenAIProvider(settings.openai)
    elif provider_type == LLMProviderType.GEMINI:
        from aura.infrastructure.llm.gemini_provider import GeminiProvider
        provider = GeminiProvider(settings.gemini)
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")

    logger.info(
        "LLM provider initialized",
        provider=provider_type.value,
        configured=provider.is_configured(),
    )
    return provider
