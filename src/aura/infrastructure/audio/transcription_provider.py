"""
Transcription Provider

Speech-to-text behind a small interface. The Whisper implementation
uses the OpenAI audio transcription endpoint.
"""

from abc import ABC, abstractmethod
from typing import Optional

from openai import APIError, AsyncOpenAI

from aura.config.logging_config import get_logger
from aura.config.settings import OpenAISettings
from aura.domain.exceptions import TransportError

logger = get_logger(__name__)


class TranscriptionProvider(ABC):
    """Audio bytes + mime type -> transcript text."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    async def transcribe(self, audio: bytes, mime_type: str, filename: str) -> str:
        """
        Transcribe a recording.

        Raises:
            TransportError: If the provider call fails
        """
        pass


class WhisperTranscriptionProvider(TranscriptionProvider):
    """
    OpenAI Whisper transcription.

    Usage:
        provider = WhisperTranscriptionProvider(settings.openai)
        text = await provider.transcribe(data, "audio/webm", "voice-note.webm")
    """

    def __init__(
        self,
        settings: OpenAISettings,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._api_key = settings.api_key.get_secret_value()
        self._model = settings.transcription_model
        self._language = settings.transcription_language
        self._client = client

    @property
    def provider_name(self) -> str:
        return "whisper"

    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
        return self._client

    async def transcribe(self, audio: bytes, mime_type: str, filename: str) -> str:
        try:
            result = await self._get_client().audio.transcriptions.create(
                model=self._model,
                file=(filename, audio, mime_type),
                language=self._language,
            )
        except APIError as e:
            logger.error("Whisper transcription failed", error=str(e))
            raise TransportError(
                f"Transcription failed: {e}",
                provider=self.provider_name,
                is_retryable=True,
                original_error=e,
            ) from e

        return result.text.strip()
