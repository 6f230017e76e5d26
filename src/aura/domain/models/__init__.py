"""Domain models package."""

from aura.domain.models.audio import AudioPayload
from aura.domain.models.check_in_session import ALLOWED_TRANSITIONS, CheckInSession
from aura.domain.models.dashboard import (
    DashboardAggregate,
    MoodTrendPoint,
    RecentEntry,
    StreakInfo,
)
from aura.domain.models.entry import CrisisFlag, Entry, utc_now

__all__ = [
    "AudioPayload",
    "ALLOWED_TRANSITIONS",
    "CheckInSession",
    "CrisisFlag",
    "DashboardAggregate",
    "Entry",
    "MoodTrendPoint",
    "RecentEntry",
    "StreakInfo",
    "utc_now",
]
