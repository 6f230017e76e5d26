"""
OpenAI LLM Provider

Alternative generative provider for check-in responses.
"""

import time
from typing import Optional

from openai import APIError, AsyncOpenAI, RateLimitError as OpenAIRateLimitError

from aura.config import get_settings
from aura.config.logging_config import get_logger
from aura.config.settings import OpenAISettings
from aura.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from aura.services.prompt.prompt_builder import BuiltPrompt

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """
    OpenAI chat completions provider.

    Usage:
        provider = OpenAIProvider()
        response = await provider.generate(prompt)
    """

    def __init__(
        self,
        settings: Optional[OpenAISettings] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        settings = settings or get_settings().openai

        self._api_key = settings.api_key.get_secret_value()
        self._default_model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._client = client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
        return self._client

    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        if not self.is_configured():
            raise LLMProviderError("OpenAI API key not configured", provider=self.provider_name)

        start_time = time.perf_counter()
        try:
            response = await self._get_client().chat.completions.create(
                model=self._default_model,
                messages=prompt.to_messages(),
                max_tokens=max_tokens or prompt.max_tokens or self._max_tokens,
                temperature=temperature if temperature is not None else prompt.temperature,
            )
        except OpenAIRateLimitError as e:
            logger.warning("OpenAI rate limit hit", error=str(e))
            raise RateLimitError(provider=self.provider_name, retry_after_seconds=60) from e
        except APIError as e:
            logger.error("OpenAI API error", error=str(e))
            raise LLMProviderError(
                f"OpenAI API error: {e}",
                provider=self.provider_name,
                is_retryable=True,
                original_error=e,
            ) from e
        except Exception as e:
            logger.error("Unexpected OpenAI error", error=str(e))
            raise LLMProviderError(
                f"Unexpected error: {e}",
                provider=self.provider_name,
                original_error=e,
            ) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        choice = response.choices[0]
        finish_reason = choice.finish_reason or "stop"
        if finish_reason == "content_filter":
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason="Content was filtered by OpenAI safety systems",
            )

        usage = {
            "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
            "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            "total_tokens": response.usage.total_tokens if response.usage else 0,
        }

        logger.debug(
            "OpenAI completion generated",
            model=self._default_model,
            tokens=usage["total_tokens"],
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=choice.message.content or "",
            finish_reason=finish_reason,
            usage=usage,
            model=self._default_model,
            provider=self.provider_name,
            latency_ms=latency_ms,
        )
