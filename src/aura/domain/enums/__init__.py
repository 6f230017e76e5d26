"""Domain enums package."""

from aura.domain.enums.check_in import (
    CheckInState,
    MoodTag,
    ResponseSource,
    Tone,
    TrendDirection,
    VideoStatus,
)

__all__ = [
    "CheckInState",
    "MoodTag",
    "ResponseSource",
    "Tone",
    "TrendDirection",
    "VideoStatus",
]
