"""
Recording Capture

Accumulates audio chunks for one recording and yields a finalized
payload on stop. Aborting discards everything captured so far.
"""

from typing import Optional

from aura.config.logging_config import get_logger
from aura.domain.exceptions import CaptureError
from aura.domain.models.audio import AudioPayload

logger = get_logger(__name__)


class RecordingCapture:
    """
    Buffer for a single in-progress recording.

    Usage:
        capture = RecordingCapture(max_bytes=25 * 1024 * 1024)
        capture.start("audio/webm")
        capture.append(chunk)
        payload = capture.stop()
    """

    def __init__(self, max_bytes: int, default_mime_type: str = "audio/webm") -> None:
        self._max_bytes = max_bytes
        self._default_mime_type = default_mime_type
        self._chunks: list[bytes] = []
        self._size = 0
        self._mime_type: Optional[str] = None

    @property
    def is_recording(self) -> bool:
        return self._mime_type is not None

    @property
    def size(self) -> int:
        return self._size

    def start(self, mime_type: Optional[str] = None) -> None:
        """
        Begin a new recording.

        Raises:
            CaptureError: If a recording is already in progress
        """
        if self.is_recording:
            raise CaptureError("Recording already in progress")
        self._reset()
        self._mime_type = mime_type or self._default_mime_type

    def append(self, chunk: bytes) -> int:
        """
        Add a chunk of encoded audio.

        Returns:
            Total bytes captured so far

        Raises:
            CaptureError: If not recording or the size limit is exceeded
        """
        if not self.is_recording:
            raise CaptureError("Not recording")
        if self._size + len(chunk) > self._max_bytes:
            raise CaptureError(f"Recording exceeds maximum size of {self._max_bytes} bytes")
        if chunk:
            self._chunks.append(chunk)
            self._size += len(chunk)
        return self._size

    def stop(self) -> AudioPayload:
        """
        Finalize the recording.

        Raises:
            CaptureError: If not recording or nothing was captured
        """
        if not self.is_recording:
            raise CaptureError("Not recording")
        mime_type = self._mime_type
        data = b"".join(self._chunks)
        self._reset()
        if not data:
            raise CaptureError("No audio was captured")
        logger.debug("Recording finalized", size=len(data), mime_type=mime_type)
        return AudioPayload(data=data, mime_type=mime_type)

    def abort(self) -> None:
        """Discard the in-progress recording. Safe to call when idle."""
        if self.is_recording:
            logger.debug("Recording aborted", discarded_bytes=self._size)
        self._reset()

    def _reset(self) -> None:
        self._chunks = []
        self._size = 0
        self._mime_type = None
