"""
Crisis Flag Database Model

LEGAL_REVIEW_REQUIRED: Retention period for context snippets.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from aura.domain.models.entry import CrisisFlag
from aura.infrastructure.database.connection import Base


class CrisisFlagModel(Base):
    """
    Crisis monitoring record.

    Table: crisis_flags
    """

    __tablename__ = "crisis_flags"

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
    severity_score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    keywords_detected: Mapped[list] = mapped_column(ARRAY(String(50)), default=list)
    context_snippet: Mapped[str] = mapped_column(String(200), nullable=False)
    assessment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    flagged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<CrisisFlagModel(id={self.id}, severity={self.severity_score})>"

    @classmethod
    def from_domain(cls, flag: CrisisFlag) -> "CrisisFlagModel":
        return cls(
            id=flag.id,
            user_id=flag.user_id,
            severity_score=flag.severity_score,
            keywords_detected=list(flag.keywords),
            context_snippet=flag.context_snippet,
            assessment=flag.assessment,
            flagged_at=flag.flagged_at,
        )

    def to_domain(self) -> CrisisFlag:
        return CrisisFlag(
            id=self.id,
            user_id=self.user_id,
            severity_score=self.severity_score,
            keywords=tuple(self.keywords_detected or ()),
            context_snippet=self.context_snippet,
            assessment=self.assessment,
            flagged_at=self.flagged_at,
        )
