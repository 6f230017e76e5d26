"""Binary storage for audio payloads."""

from aura.infrastructure.storage.audio_store import AudioStore, LocalAudioStore

__all__ = [
    "AudioStore",
    "LocalAudioStore",
]
