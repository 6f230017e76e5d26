"""
Unit Tests for Recording Capture
"""

import pytest

from aura.domain.exceptions import CaptureError
from aura.services.capture import RecordingCapture


class TestRecordingCapture:
    """Test suite for RecordingCapture."""

    @pytest.fixture
    def capture(self) -> RecordingCapture:
        return RecordingCapture(max_bytes=16)

    def test_chunks_are_joined_in_order(self, capture: RecordingCapture) -> None:
        capture.start("audio/ogg")
        capture.append(b"abc")
        capture.append(b"")
        total = capture.append(b"def")

        payload = capture.stop()

        assert total == 6
        assert payload.data == b"abcdef"
        assert payload.mime_type == "audio/ogg"
        assert not capture.is_recording

    def test_default_mime_type(self, capture: RecordingCapture) -> None:
        capture.start()
        capture.append(b"x")

        assert capture.stop().mime_type == "audio/webm"

    def test_double_start_rejected(self, capture: RecordingCapture) -> None:
        capture.start()

        with pytest.raises(CaptureError, match="already in progress"):
            capture.start()

    def test_append_when_idle_rejected(self, capture: RecordingCapture) -> None:
        with pytest.raises(CaptureError, match="Not recording"):
            capture.append(b"abc")

    def test_size_limit_enforced(self, capture: RecordingCapture) -> None:
        capture.start()
        capture.append(b"x" * 10)

        with pytest.raises(CaptureError, match="maximum size"):
            capture.append(b"x" * 7)

        assert capture.size == 10

    def test_empty_recording_rejected(self, capture: RecordingCapture) -> None:
        capture.start()

        with pytest.raises(CaptureError, match="No audio"):
            capture.stop()

        assert not capture.is_recording

    def test_abort_discards_audio(self, capture: RecordingCapture) -> None:
        capture.start()
        capture.append(b"abc")

        capture.abort()

        assert not capture.is_recording
        assert capture.size == 0
        with pytest.raises(CaptureError):
            capture.stop()

    def test_abort_when_idle_is_safe(self, capture: RecordingCapture) -> None:
        capture.abort()

        assert not capture.is_recording
