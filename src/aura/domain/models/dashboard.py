"""
Dashboard Aggregate

Derived, cached view over a user's entries. Never persisted and
never written proactively; computed lazily on cache miss.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from aura.domain.enums.check_in import MoodTag, TrendDirection


@dataclass(frozen=True)
class MoodTrendPoint:
    """Dominant mood for one calendar day."""

    day: date
    mood: Optional[MoodTag]
    intensity: float
    count: int

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "mood": self.mood.value if self.mood else None,
            "intensity": self.intensity,
            "count": self.count,
        }


@dataclass(frozen=True)
class StreakInfo:
    """Consecutive check-in days."""

    current: int = 0
    longest: int = 0
    last_check_in: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "longest": self.longest,
            "last_check_in": self.last_check_in.isoformat() if self.last_check_in else None,
        }


@dataclass(frozen=True)
class RecentEntry:
    """Dashboard summary row for one entry."""

    id: UUID
    mood_tag: MoodTag
    text_summary: str
    has_video: bool
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "mood_tag": self.mood_tag.value,
            "text_summary": self.text_summary,
            "has_video": self.has_video,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class DashboardAggregate:
    """
    Per-user dashboard analytics.

    Attributes:
        user_id: Owning user
        mood_trends: Seven points, oldest first, zero-filled
        streak: Current and longest streak
        dominant_mood: Most frequent mood across all entries
        average_mood_score: Mean base score across all entries
        trend: Recent 7 entries compared with the previous 7
        total_entries: Number of entries
        active_days: Distinct calendar days with an entry
        recent_entries: Newest entries first
        computed_at: When this aggregate was computed
    """

    user_id: UUID
    mood_trends: tuple[MoodTrendPoint, ...]
    streak: StreakInfo
    dominant_mood: Optional[MoodTag]
    average_mood_score: Optional[float]
    trend: TrendDirection
    total_entries: int
    active_days: int
    computed_at: datetime
    recent_entries: tuple[RecentEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "mood_trends": [p.to_dict() for p in self.mood_trends],
            "streak": self.streak.to_dict(),
            "dominant_mood": self.dominant_mood.value if self.dominant_mood else None,
            "average_mood_score": self.average_mood_score,
            "trend": self.trend.value,
            "total_entries": self.total_entries,
            "active_days": self.active_days,
            "recent_entries": [e.to_dict() for e in self.recent_entries],
            "computed_at": self.computed_at.isoformat(),
        }
