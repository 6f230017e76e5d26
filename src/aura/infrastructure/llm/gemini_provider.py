"""
Google Gemini LLM Provider

Primary generative provider for check-in responses.
"""

import time
from typing import Optional

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from aura.config import get_settings
from aura.config.logging_config import get_logger
from aura.config.settings import GeminiSettings
from aura.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from aura.services.prompt.prompt_builder import BuiltPrompt

logger = get_logger(__name__)


class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider.

    Usage:
        provider = GeminiProvider()
        response = await provider.generate(prompt)
    """

    # Dangerous-content threshold stays permissive so users can talk about hard feelings
    SAFETY_SETTINGS = [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_ONLY_HIGH"},
    ]

    def __init__(self, settings: Optional[GeminiSettings] = None) -> None:
        settings = settings or get_settings().gemini

        self._api_key = settings.api_key.get_secret_value()
        self._default_model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._configured = False

        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._configured = True

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._configured

    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        if not self.is_configured():
            raise LLMProviderError("Gemini API key not configured", provider=self.provider_name)

        model = genai.GenerativeModel(
            model_name=self._default_model,
            safety_settings=self.SAFETY_SETTINGS,
            system_instruction=prompt.system_prompt,
        )
        generation_config = GenerationConfig(
            max_output_tokens=max_tokens or prompt.max_tokens or self._max_tokens,
            temperature=temperature if temperature is not None else prompt.temperature,
        )

        start_time = time.perf_counter()
        try:
            response = await model.generate_content_async(
                prompt.user_message,
                generation_config=generation_config,
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "quota" in error_msg or "rate" in error_msg or "429" in error_msg:
                logger.warning("Gemini rate limit hit", error=str(e))
                raise RateLimitError(provider=self.provider_name, retry_after_seconds=60) from e
            logger.error("Gemini API error", error=str(e))
            raise LLMProviderError(
                f"Gemini API error: {e}",
                provider=self.provider_name,
                original_error=e,
            ) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise ContentFilterError(provider=self.provider_name, filter_reason=str(feedback.block_reason))

        try:
            content = response.text or ""
        except ValueError as e:
            # .text raises when every candidate was blocked
            raise ContentFilterError(provider=self.provider_name, filter_reason=str(e)) from e

        usage_metadata = getattr(response, "usage_metadata", None)
        usage = {
            "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0) or 0,
            "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0) or 0,
            "total_tokens": getattr(usage_metadata, "total_token_count", 0) or 0,
        }

        logger.debug("Gemini completion generated", model=self._default_model, latency_ms=latency_ms)

        return LLMResponse(
            content=content,
            usage=usage,
            model=self._default_model,
            provider=self.provider_name,
            latency_ms=latency_ms,
        )
