"""
Aura Domain Layer

Check-in entities and value objects, independent of infrastructure.
"""

from aura.domain.enums.check_in import (
    CheckInState,
    MoodTag,
    ResponseSource,
    Tone,
    TrendDirection,
    VideoStatus,
)
from aura.domain.models.audio import AudioPayload
from aura.domain.models.check_in_session import CheckInSession
from aura.domain.models.dashboard import DashboardAggregate, MoodTrendPoint, StreakInfo
from aura.domain.models.entry import CrisisFlag, Entry

__all__ = [
    # Enums
    "CheckInState",
    "MoodTag",
    "ResponseSource",
    "Tone",
    "TrendDirection",
    "VideoStatus",
    # Models
    "AudioPayload",
    "CheckInSession",
    "CrisisFlag",
    "DashboardAggregate",
    "Entry",
    "MoodTrendPoint",
    "StreakInfo",
]
