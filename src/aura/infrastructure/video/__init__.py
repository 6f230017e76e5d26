"""Video generation providers."""

from aura.infrastructure.video.tavus_provider import (
    TavusVideoProvider,
    VideoGenerationProvider,
    VideoJob,
)

__all__ = [
    "TavusVideoProvider",
    "VideoGenerationProvider",
    "VideoJob",
]
