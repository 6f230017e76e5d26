"""
Transcription Gateway

Turns a finalized recording into text. With no provider configured
it degrades to a deterministic stub so the rest of the pipeline can
run in development: the same audio always yields the same phrase.
"""

import hashlib
from typing import Optional

from aura.config.logging_config import get_logger
from aura.domain.exceptions import TransportError
from aura.domain.models.audio import AudioPayload
from aura.infrastructure.audio.transcription_provider import TranscriptionProvider
from aura.infrastructure.metrics.prometheus_metrics import TRANSCRIPTIONS_TOTAL, track_stage

logger = get_logger(__name__)


STUB_PHRASES: tuple[str, ...] = (
    "I'm feeling anxious today and could really use some support and guidance",
    "I had a pretty good day overall but I'm feeling a bit overwhelmed by everything",
    "I've been feeling quite stressed about work lately and I need to find ways to relax",
    "I'm feeling grateful for all the good things in my life today",
    "I've been feeling sad and down lately and could use some encouragement",
    "I had some really frustrating moments today but I'm trying to stay positive",
    "I'm feeling excited and hopeful about some upcoming opportunities in my life",
    "I've been struggling to manage my emotions today and need some help",
    "I'm feeling proud of the progress I've made recently in taking care of myself",
    "I've been having trouble sleeping and it's affecting my mood during the day",
    "I feel like I'm making good progress with my mental health journey",
    "Today was challenging but I'm learning to be more patient with myself",
)


def stub_transcript(data: bytes) -> str:
    """Pick a stub phrase from a stable hash of the audio bytes."""
    digest = hashlib.sha256(data).digest()
    return STUB_PHRASES[int.from_bytes(digest[:4], "big") % len(STUB_PHRASES)]


class TranscriptionGateway:
    """
    Audio to transcript.

    Usage:
        gateway = TranscriptionGateway(WhisperTranscriptionProvider(settings.openai))
        text = await gateway.transcribe(payload)
    """

    def __init__(self, provider: Optional[TranscriptionProvider] = None) -> None:
        self._provider = provider

    @property
    def uses_stub(self) -> bool:
        return self._provider is None or not self._provider.is_configured()

    async def transcribe(self, payload: AudioPayload) -> str:
        """
        Transcribe a recording.

        Raises:
            TransportError: If the provider fails or returns no text
        """
        if self.uses_stub:
            TRANSCRIPTIONS_TOTAL.labels(mode="stub", status="success").inc()
            logger.info("Transcription provider not configured, using stub", size=payload.size)
            return stub_transcript(payload.data)

        try:
            with track_stage("transcription"):
                text = await self._provider.transcribe(
                    payload.data,
                    payload.mime_type,
                    f"voice-note.{payload.extension}",
                )
        except TransportError:
            TRANSCRIPTIONS_TOTAL.labels(mode="provider", status="error").inc()
            raise

        if not text:
            TRANSCRIPTIONS_TOTAL.labels(mode="provider", status="error").inc()
            raise TransportError("Transcription returned no text", provider=self._provider.provider_name)

        TRANSCRIPTIONS_TOTAL.labels(mode="provider", status="success").inc()
        return text
