"""Transcription package."""

from aura.services.transcription.transcription_gateway import (
    STUB_PHRASES,
    TranscriptionGateway,
    stub_transcript,
)

__all__ = [
    "STUB_PHRASES",
    "TranscriptionGateway",
    "stub_transcript",
]
