"""
Entry Database Model

PRIVACY: transcript and text_summary are journal content and
should be encrypted at rest.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from aura.domain.enums.check_in import MoodTag
from aura.domain.models.entry import Entry
from aura.infrastructure.database.connection import Base


class EntryModel(Base):
    """
    Persisted check-in entry.

    Table: entries
    """

    __tablename__ = "entries"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    user_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        nullable=False,
        index=True,
    )
    mood_tag: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="MoodTag value",
    )
    transcript: Mapped[str] = mapped_column(Text, nullable=False)
    text_summary: Mapped[str] = mapped_column(Text, nullable=False)
    voice_note_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    ai_response_audio_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    video_ref: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
        doc="Set at most once by the video coordinator",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<EntryModel(id={self.id}, mood_tag={self.mood_tag})>"

    @classmethod
    def from_domain(cls, entry: Entry) -> "EntryModel":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            mood_tag=entry.mood_tag.value,
            transcript=entry.transcript,
            text_summary=entry.text_summary,
            voice_note_ref=entry.voice_note_ref,
            ai_response_audio_ref=entry.ai_response_audio_ref,
            video_ref=entry.video_ref,
            created_at=entry.created_at,
        )

    def to_domain(self) -> Entry:
        return Entry(
            id=self.id,
            user_id=self.user_id,
            mood_tag=MoodTag(self.mood_tag),
            transcript=self.transcript,
            text_summary=self.text_summary,
            voice_note_ref=self.voice_note_ref,
            ai_response_audio_ref=self.ai_response_audio_ref,
            video_ref=self.video_ref,
            created_at=self.created_at,
        )
