"""Speech-to-text and text-to-speech providers."""

from aura.infrastructure.audio.speech_provider import (
    ElevenLabsSpeechProvider,
    SpeechSynthesisProvider,
)
from aura.infrastructure.audio.transcription_provider import (
    TranscriptionProvider,
    WhisperTranscriptionProvider,
)

__all__ = [
    "ElevenLabsSpeechProvider",
    "SpeechSynthesisProvider",
    "TranscriptionProvider",
    "WhisperTranscriptionProvider",
]
