"""Speech synthesis package."""

from aura.services.speech.speech_synthesis import TONE_VOICES, SpeechSynthesisAdapter

__all__ = [
    "TONE_VOICES",
    "SpeechSynthesisAdapter",
]
