"""
Unit Tests for the Video Generation Coordinator

Submission happens once; only the status poll repeats. The entry's
video_ref is patched at most once, and only on completion.
"""

import pytest

from aura.config.settings import VideoSettings
from aura.domain.enums.check_in import MoodTag, VideoStatus
from aura.infrastructure.database.repositories.entry_store import InMemoryEntryStore
from aura.services.background import BackgroundTaskRegistry
from aura.services.video import PollMode, VideoGenerationCoordinator, VideoOutcome

from conftest import FakeVideoProvider, SleepRecorder, make_entry, transport_error


PENDING = VideoStatus.PENDING
GENERATING = VideoStatus.GENERATING
COMPLETED = VideoStatus.COMPLETED
FAILED = VideoStatus.FAILED


class TestVideoGenerationCoordinator:
    """Test suite for VideoGenerationCoordinator."""

    @pytest.fixture
    def store(self) -> InMemoryEntryStore:
        return InMemoryEntryStore()

    @pytest.fixture
    async def entry(self, store: InMemoryEntryStore, user_id, fixed_now):
        entry = make_entry(user_id, fixed_now, MoodTag.CALM)
        await store.create(entry)
        return entry

    @pytest.fixture
    def sleep(self) -> SleepRecorder:
        return SleepRecorder()

    def coordinator(self, provider, store, sleep, **settings) -> VideoGenerationCoordinator:
        return VideoGenerationCoordinator(
            provider,
            store,
            BackgroundTaskRegistry(),
            VideoSettings(**settings),
            sleep=sleep,
        )

    async def test_completed_job_patches_entry_once(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([PENDING, GENERATING, COMPLETED])
        seen: list[VideoStatus] = []

        outcome = await self.coordinator(provider, store, sleep).run(
            entry.id, "script", PollMode.INLINE, on_status=seen.append
        )

        patched = await store.get(entry.id)
        assert outcome == VideoOutcome.COMPLETED
        assert patched.video_ref == "https://videos.example/v-1.mp4"
        assert provider.status_calls == 3
        assert len(provider.submit_calls) == 1
        assert seen == [PENDING, PENDING, GENERATING, COMPLETED]
        assert sleep.calls == [4.0, 4.0, 4.0]

    async def test_exhausted_polling_leaves_entry_unpatched(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([PENDING] * 10)
        seen: list[VideoStatus] = []

        outcome = await self.coordinator(provider, store, sleep, inline_max_attempts=5).run(
            entry.id, "script", PollMode.INLINE, on_status=seen.append
        )

        assert outcome == VideoOutcome.EXHAUSTED
        assert provider.status_calls == 5
        assert (await store.get(entry.id)).video_ref is None
        assert seen[-1] == FAILED

    async def test_detached_schedule(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([COMPLETED])

        await self.coordinator(provider, store, sleep).run(entry.id, "script", PollMode.DETACHED)

        assert sleep.calls == [30.0]

    async def test_failed_job_is_not_patched(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([GENERATING, FAILED])

        outcome = await self.coordinator(provider, store, sleep).run(entry.id, "script", PollMode.INLINE)

        assert outcome == VideoOutcome.FAILED
        assert (await store.get(entry.id)).video_ref is None

    async def test_submit_failure_is_not_retried(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([], submit_error=transport_error())

        outcome = await self.coordinator(provider, store, sleep).run(entry.id, "script")

        assert outcome == VideoOutcome.SUBMIT_FAILED
        assert len(provider.submit_calls) == 1
        assert provider.status_calls == 0

    async def test_transient_status_error_consumes_an_attempt(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([transport_error(), COMPLETED])

        outcome = await self.coordinator(provider, store, sleep, inline_max_attempts=2).run(
            entry.id, "script", PollMode.INLINE
        )

        assert outcome == VideoOutcome.COMPLETED
        assert provider.status_calls == 2

    async def test_status_errors_until_exhausted(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([transport_error()] * 3)

        outcome = await self.coordinator(provider, store, sleep, inline_max_attempts=3).run(
            entry.id, "script", PollMode.INLINE
        )

        assert outcome == VideoOutcome.EXHAUSTED

    async def test_already_patched_entry_reports_patch_failure(self, store, user_id, fixed_now, sleep) -> None:
        entry = make_entry(user_id, fixed_now, video_ref="https://videos.example/old.mp4")
        await store.create(entry)
        provider = FakeVideoProvider([COMPLETED])

        outcome = await self.coordinator(provider, store, sleep).run(entry.id, "script", PollMode.INLINE)

        assert outcome == VideoOutcome.PATCH_FAILED
        assert (await store.get(entry.id)).video_ref == "https://videos.example/old.mp4"

    async def test_immediately_completed_job_skips_polling(self, store, entry, sleep) -> None:
        provider = FakeVideoProvider([], initial=COMPLETED)

        outcome = await self.coordinator(provider, store, sleep).run(entry.id, "script")

        assert outcome == VideoOutcome.COMPLETED
        assert provider.status_calls == 0
        assert sleep.calls == []

    async def test_start_runs_in_background(self, store, entry, sleep) -> None:
        registry = BackgroundTaskRegistry()
        provider = FakeVideoProvider([COMPLETED])
        coordinator = VideoGenerationCoordinator(provider, store, registry, sleep=sleep)

        task = coordinator.start(entry.id, "script", PollMode.INLINE, persona_id="p-1")
        await registry.wait_idle()

        assert task is not None
        assert task.result() == VideoOutcome.COMPLETED
        assert provider.submit_calls == [("script", "p-1")]

    async def test_start_disabled_returns_none(self, store, entry, sleep) -> None:
        coordinator = self.coordinator(FakeVideoProvider([]), store, sleep, enabled=False)

        assert not coordinator.is_enabled
        assert coordinator.start(entry.id, "script") is None

    async def test_no_provider_is_disabled(self, store, entry) -> None:
        coordinator = VideoGenerationCoordinator(None, store, BackgroundTaskRegistry())

        assert coordinator.start(entry.id, "script") is None

    def test_default_schedules(self, store) -> None:
        coordinator = VideoGenerationCoordinator(None, store, BackgroundTaskRegistry())

        assert coordinator.schedule_for(PollMode.INLINE).max_attempts == 15
        assert coordinator.schedule_for(PollMode.INLINE).interval_seconds == 4.0
        assert coordinator.schedule_for(PollMode.DETACHED).max_attempts == 20
        assert coordinator.schedule_for(PollMode.DETACHED).interval_seconds == 30.0
