"""Video generation package."""

from aura.services.video.video_coordinator import (
    DEFAULT_SCHEDULES,
    PollMode,
    PollSchedule,
    VideoGenerationCoordinator,
    VideoOutcome,
)

__all__ = [
    "DEFAULT_SCHEDULES",
    "PollMode",
    "PollSchedule",
    "VideoGenerationCoordinator",
    "VideoOutcome",
]
