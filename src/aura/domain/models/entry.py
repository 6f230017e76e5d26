"""
Entry and Crisis Flag Domain Models

An Entry is the durable record of one completed check-in.
It is immutable after creation except for video_ref, which the
video coordinator may patch exactly once.

PRIVACY: transcript and text_summary are sensitive journal content.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from aura.domain.enums.check_in import MoodTag


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Entry:
    """
    Persisted check-in record.

    Attributes:
        id: Unique entry identifier
        user_id: Owning user
        mood_tag: Mood selected during review
        transcript: Reviewed transcript of the voice note
        text_summary: Final therapeutic response text
        voice_note_ref: Reference to the stored voice recording
        ai_response_audio_ref: Reference to the synthesized response audio
        video_ref: Reference to the generated video (patched later)
        created_at: Creation timestamp (UTC)
    """

    user_id: UUID
    mood_tag: MoodTag
    transcript: str
    text_summary: str
    id: UUID = field(default_factory=uuid4)
    voice_note_ref: Optional[str] = None
    ai_response_audio_ref: Optional[str] = None
    video_ref: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "mood_tag": self.mood_tag.value,
            "transcript": self.transcript,
            "text_summary": self.text_summary,
            "voice_note_ref": self.voice_note_ref,
            "ai_response_audio_ref": self.ai_response_audio_ref,
            "video_ref": self.video_ref,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class CrisisFlag:
    """
    Monitoring record written when a transcript scores severity >= 3.

    Flags are written fire-and-forget and never block the check-in.

    LEGAL_REVIEW_REQUIRED: retention of context snippets.
    """

    user_id: UUID
    severity_score: int
    keywords: tuple[str, ...]
    context_snippet: str
    id: UUID = field(default_factory=uuid4)
    assessment: str = ""
    flagged_at: datetime = field(default_factory=utc_now)

    # Maximum characters of transcript kept as context
    SNIPPET_LENGTH = 200

    @classmethod
    def from_transcript(
        cls,
        user_id: UUID,
        transcript: str,
        severity: int,
        keywords: list[str],
    ) -> "CrisisFlag":
        return cls(
            user_id=user_id,
            severity_score=severity,
            keywords=tuple(keywords),
            context_snippet=transcript[: cls.SNIPPET_LENGTH],
            assessment=f"Automatic detection - severity {severity}/10",
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "severity_score": self.severity_score,
            "keywords": list(self.keywords),
            "assessment": self.assessment,
            "flagged_at": self.flagged_at.isoformat(),
        }
