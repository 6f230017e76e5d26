"""
Speech Synthesis Provider

Text-to-speech behind a small interface. The ElevenLabs
implementation calls the REST API directly over httpx.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from aura.config.logging_config import get_logger
from aura.config.settings import ElevenLabsSettings
from aura.domain.exceptions import TransportError

logger = get_logger(__name__)


class SpeechSynthesisProvider(ABC):
    """Text + voice id -> encoded audio bytes."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """
        Synthesize speech.

        Raises:
            TransportError: If the provider call fails
        """
        pass


class ElevenLabsSpeechProvider(SpeechSynthesisProvider):
    """
    ElevenLabs text-to-speech.

    Returns MPEG audio.
    """

    VOICE_SETTINGS = {
        "stability": 0.5,
        "similarity_boost": 0.5,
        "style": 0.0,
        "use_speaker_boost": True,
    }

    def __init__(
        self,
        settings: ElevenLabsSettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = settings.api_key.get_secret_value()
        self._base_url = settings.base_url.rstrip("/")
        self._model_id = settings.model_id
        self._timeout = settings.timeout_seconds
        self._client = client

    @property
    def provider_name(self) -> str:
        return "elevenlabs"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, **kwargs)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, **kwargs)

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        if not self.is_configured():
            raise TransportError("ElevenLabs API key not configured", provider=self.provider_name)

        try:
            response = await self._post(
                f"{self._base_url}/text-to-speech/{voice_id}",
                headers={
                    "Accept": "audio/mpeg",
                    "xi-api-key": self._api_key,
                },
                json={
                    "text": text,
                    "model_id": self._model_id,
                    "voice_settings": self.VOICE_SETTINGS,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(
                f"ElevenLabs request failed: {e}",
                provider=self.provider_name,
                original_error=e,
            ) from e

        return response.content
