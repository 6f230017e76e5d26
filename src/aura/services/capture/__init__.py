"""Recording capture package."""

from aura.services.capture.recording_capture import RecordingCapture

__all__ = ["RecordingCapture"]
