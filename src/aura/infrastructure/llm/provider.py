"""
LLM Provider Abstract Interface

Contract for generative text providers. The response orchestrator
only talks to this interface, so Gemini and OpenAI are
interchangeable.

Providers make exactly one call per generate(). Reliability comes
from the orchestrator's template fallback, not from retries.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from aura.domain.exceptions import TransportError
from aura.services.prompt.prompt_builder import BuiltPrompt


@dataclass
class LLMResponse:
    """
    Response from an LLM provider.

    Attributes:
        content: Generated text
        finish_reason: Why generation stopped
        usage: Token usage statistics
        model: Model identifier used
        provider: Provider name
        latency_ms: Response time in milliseconds
    """

    content: str
    finish_reason: str = "stop"
    usage: dict = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMProvider(ABC):
    """
    Abstract generative text provider.

    An unconfigured provider (no API key) reports is_configured()
    False; the orchestrator then skips the AI attempt entirely.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate a completion.

        Args:
            prompt: Built prompt
            max_tokens: Optional override
            temperature: Optional override

        Returns:
            LLMResponse with generated content

        Raises:
            LLMProviderError: On auth, quota, timeout, or filter failures
        """
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        pass

    async def health_check(self) -> bool:
        return self.is_configured()


class LLMProviderError(TransportError):
    """Base exception for LLM provider errors."""


class RateLimitError(LLMProviderError):
    """Rate limit or quota exceeded."""

    def __init__(self, provider: str, retry_after_seconds: Optional[int] = None) -> None:
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            is_retryable=True,
        )
        self.retry_after_seconds = retry_after_seconds


class ContentFilterError(LLMProviderError):
    """Output was blocked by the provider's safety systems."""

    def __init__(self, provider: str, filter_reason: str = "") -> None:
        super().__init__(
            f"Content filtered by {provider}: {filter_reason}",
            provider=provider,
        )
        self.filter_reason = filter_reason
