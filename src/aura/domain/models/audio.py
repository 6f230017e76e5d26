"""Finalized audio produced by a recording."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioPayload:
    """
    Complete voice recording ready for transcription.

    Attributes:
        data: Raw encoded audio bytes
        mime_type: Container/codec type (e.g. audio/webm)
    """

    data: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension derived from the mime type."""
        subtype = self.mime_type.split("/", 1)[-1].split(";", 1)[0].strip()
        return {"mpeg": "mp3", "x-wav": "wav", "wave": "wav"}.get(subtype, subtype or "bin")
