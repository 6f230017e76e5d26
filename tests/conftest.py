"""Tests configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from uuid import UUID, uuid4

import pytest

from aura.config import Settings
from aura.config.settings import StorageSettings
from aura.domain.enums.check_in import MoodTag, VideoStatus
from aura.domain.exceptions import PersistenceError, TransportError
from aura.domain.models.entry import Entry
from aura.infrastructure.audio.speech_provider import SpeechSynthesisProvider
from aura.infrastructure.audio.transcription_provider import TranscriptionProvider
from aura.infrastructure.database.repositories.entry_store import InMemoryEntryStore
from aura.infrastructure.llm.provider import LLMProvider, LLMProviderError, LLMResponse
from aura.infrastructure.video.tavus_provider import VideoGenerationProvider, VideoJob
from aura.services.prompt.prompt_builder import BuiltPrompt


# =============================================================================
# Fake providers
# =============================================================================

class FakeLLMProvider(LLMProvider):
    """Returns canned text, or raises when error is set."""

    def __init__(self, text: str = "", error: Optional[Exception] = None, configured: bool = True) -> None:
        self.text = text
        self.error = error
        self.configured = configured
        self.prompts: list[BuiltPrompt] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt, *, max_tokens=None, temperature=None) -> LLMResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.text, provider="fake", model="fake-model")


class FakeTranscriptionProvider(TranscriptionProvider):
    def __init__(self, text: str = "I feel calm today", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[bytes, str, str]] = []

    @property
    def provider_name(self) -> str:
        return "fake-whisper"

    def is_configured(self) -> bool:
        return True

    async def transcribe(self, audio: bytes, mime_type: str, filename: str) -> str:
        self.calls.append((audio, mime_type, filename))
        if self.error is not None:
            raise self.error
        return self.text


class FakeSpeechProvider(SpeechSynthesisProvider):
    def __init__(self, audio: bytes = b"ID3-fake-audio", error: Optional[Exception] = None) -> None:
        self.audio = audio
        self.error = error
        self.calls: list[tuple[str, str]] = []

    @property
    def provider_name(self) -> str:
        return "fake-speech"

    def is_configured(self) -> bool:
        return True

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.error is not None:
            raise self.error
        return self.audio


class FakeVideoProvider(VideoGenerationProvider):
    """
    Replays a scripted status sequence.

    Items may be VideoStatus values or exceptions to raise.
    """

    def __init__(
        self,
        statuses: list[Union[VideoStatus, Exception]],
        initial: VideoStatus = VideoStatus.PENDING,
        download_ref: str = "https://videos.example/v-1.mp4",
        submit_error: Optional[Exception] = None,
    ) -> None:
        self.statuses = list(statuses)
        self.initial = initial
        self.download_ref = download_ref
        self.submit_error = submit_error
        self.submit_calls: list[tuple[str, Optional[str]]] = []
        self.status_calls = 0

    @property
    def provider_name(self) -> str:
        return "fake-video"

    def is_configured(self) -> bool:
        return True

    def _job(self, status: VideoStatus) -> VideoJob:
        ref = self.download_ref if status == VideoStatus.COMPLETED else None
        return VideoJob(job_id="job-1", status=status, download_ref=ref)

    async def submit(self, script: str, persona_id: Optional[str] = None) -> VideoJob:
        self.submit_calls.append((script, persona_id))
        if self.submit_error is not None:
            raise self.submit_error
        return self._job(self.initial)

    async def status(self, job_id: str) -> VideoJob:
        self.status_calls += 1
        item = self.statuses.pop(0) if self.statuses else VideoStatus.PENDING
        if isinstance(item, Exception):
            raise item
        return self._job(item)


class FailingEntryStore(InMemoryEntryStore):
    """In-memory store whose inserts fail until fail_inserts is cleared."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_inserts = True

    async def _insert(self, entry: Entry) -> None:
        if self.fail_inserts:
            raise PersistenceError("database unavailable")
        await super()._insert(entry)


class SleepRecorder:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def provider_error(message: str = "quota exceeded") -> LLMProviderError:
    return LLMProviderError(message, provider="fake", is_retryable=False)


def transport_error(message: str = "connection reset") -> TransportError:
    return TransportError(message, provider="fake", is_retryable=True)


def make_entry(
    user_id: UUID,
    created_at: datetime,
    mood: MoodTag = MoodTag.CALM,
    video_ref: Optional[str] = None,
) -> Entry:
    return Entry(
        user_id=user_id,
        mood_tag=mood,
        transcript="I went for a walk",
        text_summary="Thank you for sharing.",
        created_at=created_at,
        video_ref=video_ref,
    )


# =============================================================================
# Fixtures
# =============================================================================

# Fixed "now" used by date-sensitive tests: midday UTC avoids day rollover
FIXED_NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with no provider keys and audio stored under tmp_path."""
    return Settings(
        env="development",
        debug=True,
        storage=StorageSettings(audio_dir=str(tmp_path / "audio"), entry_backend="memory"),
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def days_ago(fixed_now):
    def _at(days: int, hours: int = 0) -> datetime:
        return fixed_now - timedelta(days=days, hours=hours)

    return _at
