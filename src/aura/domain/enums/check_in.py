"""
Check-in Enumerations

Shared vocabulary for the check-in pipeline: moods, tones,
session states, response sources, and video job states.
"""

from enum import StrEnum


class MoodTag(StrEnum):
    """Mood the user selects while reviewing a check-in."""

    HAPPY = "happy"
    SAD = "sad"
    ANXIOUS = "anxious"
    STRESSED = "stressed"
    CALM = "calm"
    EXCITED = "excited"
    FRUSTRATED = "frustrated"
    GRATEFUL = "grateful"
    OVERWHELMED = "overwhelmed"
    CONTENT = "content"


class Tone(StrEnum):
    """User's preferred response tone."""

    CALM = "calm"
    MOTIVATIONAL = "motivational"
    REFLECTIVE = "reflective"


class CheckInState(StrEnum):
    """
    Check-in session lifecycle.

    Forward order: idle -> recording -> processing -> reviewing
    -> generating -> complete. ERROR is reachable from anywhere
    and recovers only to IDLE or REVIEWING.
    """

    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"
    REVIEWING = "reviewing"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ResponseSource(StrEnum):
    """Where the final response text came from."""

    AI = "ai"
    HYBRID = "hybrid"
    TEMPLATE = "template"


class VideoStatus(StrEnum):
    """Video generation job state as reported by the provider."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)


class TrendDirection(StrEnum):
    """Mood trend comparing the last 7 entries with the 7 before."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
