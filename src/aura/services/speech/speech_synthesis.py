"""
Speech Synthesis Adapter

Best-effort text-to-speech for the final response. This is the only
inline pipeline stage allowed to fail: any failure is logged and the
check-in continues without audio.
"""

from typing import Optional

from aura.config.logging_config import get_logger
from aura.domain.enums.check_in import Tone
from aura.domain.exceptions import TransportError
from aura.infrastructure.audio.speech_provider import SpeechSynthesisProvider
from aura.infrastructure.metrics.prometheus_metrics import SPEECH_SYNTHESIS_TOTAL, track_stage

logger = get_logger(__name__)


# Voice per response tone
TONE_VOICES: dict[Tone, str] = {
    Tone.CALM: "pNInz6obpgDQGcFmaJgB",          # Adam
    Tone.MOTIVATIONAL: "EXAVITQu4vr4xnSDxMaL",  # Bella
    Tone.REFLECTIVE: "AZnzlk1XvdvUeBnXmlld",    # Domi
}


class SpeechSynthesisAdapter:
    """
    Wraps a speech provider so failures never escape.

    Usage:
        adapter = SpeechSynthesisAdapter(provider)
        audio = await adapter.synthesize(text, Tone.CALM)  # bytes or None
    """

    def __init__(self, provider: Optional[SpeechSynthesisProvider] = None) -> None:
        self._provider = provider

    @staticmethod
    def voice_for(tone: Tone) -> str:
        return TONE_VOICES[tone]

    async def synthesize(self, text: str, tone: Tone) -> Optional[bytes]:
        """
        Synthesize the response in the voice for tone.

        Returns:
            MPEG audio bytes, or None if synthesis was skipped or failed
        """
        if self._provider is None or not self._provider.is_configured():
            SPEECH_SYNTHESIS_TOTAL.labels(status="skipped").inc()
            logger.info("Speech provider not configured, skipping synthesis")
            return None

        try:
            with track_stage("synthesis"):
                audio = await self._provider.synthesize(text, self.voice_for(tone))
        except TransportError as e:
            SPEECH_SYNTHESIS_TOTAL.labels(status="failed").inc()
            logger.warning("Speech synthesis failed", provider=e.provider, error=str(e))
            return None
        except Exception as e:
            SPEECH_SYNTHESIS_TOTAL.labels(status="failed").inc()
            logger.error("Unexpected speech synthesis error", error=str(e), error_type=type(e).__name__)
            return None

        if not audio:
            SPEECH_SYNTHESIS_TOTAL.labels(status="failed").inc()
            logger.warning("Speech synthesis returned no audio")
            return None

        SPEECH_SYNTHESIS_TOTAL.labels(status="success").inc()
        return audio
