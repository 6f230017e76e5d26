"""
Video Generation Coordinator

Submits a video script once and polls the job in the background,
patching the entry's video_ref when the video completes.

Two poll schedules:
    inline   - short poll while a session is still open (4s x 15)
    detached - long poll after the session completed (30s x 20)

Only the status poll is retried. The submission itself is never
repeated; a failed or exhausted job leaves video_ref null for good.
"""

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import Awaitable, Callable, Optional
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from aura.config.logging_config import get_logger
from aura.config.settings import VideoSettings
from aura.domain.enums.check_in import VideoStatus
from aura.domain.exceptions import PersistenceError, TransportError
from aura.infrastructure.database.repositories.entry_store import EntryStore
from aura.infrastructure.metrics.prometheus_metrics import ACTIVE_VIDEO_POLLS, VIDEO_JOBS_TOTAL
from aura.infrastructure.video.tavus_provider import VideoGenerationProvider, VideoJob
from aura.services.background import BackgroundTaskRegistry

logger = get_logger(__name__)


class PollMode(StrEnum):
    INLINE = "inline"
    DETACHED = "detached"


class VideoOutcome(StrEnum):
    """How a video job ended."""

    COMPLETED = "completed"
    FAILED = "failed"
    EXHAUSTED = "exhausted"
    SUBMIT_FAILED = "submit_failed"
    PATCH_FAILED = "patch_failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PollSchedule:
    interval_seconds: float
    max_attempts: int


DEFAULT_SCHEDULES: dict[PollMode, PollSchedule] = {
    PollMode.INLINE: PollSchedule(interval_seconds=4.0, max_attempts=15),
    PollMode.DETACHED: PollSchedule(interval_seconds=30.0, max_attempts=20),
}

StatusCallback = Callable[[VideoStatus], None]


def _still_running(job: VideoJob) -> bool:
    return not job.status.is_terminal


class VideoGenerationCoordinator:
    """
    Background video jobs for persisted entries.

    Usage:
        coordinator = VideoGenerationCoordinator(provider, entry_store, registry)
        coordinator.start(entry.id, script)  # returns immediately
    """

    def __init__(
        self,
        provider: Optional[VideoGenerationProvider],
        entry_store: EntryStore,
        registry: BackgroundTaskRegistry,
        settings: Optional[VideoSettings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            provider: Video provider; None or unconfigured disables video
            entry_store: Store holding the entry to patch
            registry: Background task registry that owns pollers
            settings: Poll schedules and default mode
            sleep: Awaitable sleep, replaceable in tests
        """
        self._provider = provider
        self._entry_store = entry_store
        self._registry = registry
        self._sleep = sleep
        self._enabled = settings.enabled if settings else True

        if settings:
            self._schedules = {
                PollMode.INLINE: PollSchedule(settings.inline_interval_seconds, settings.inline_max_attempts),
                PollMode.DETACHED: PollSchedule(settings.detached_interval_seconds, settings.detached_max_attempts),
            }
            self._default_mode = PollMode(settings.default_mode)
        else:
            self._schedules = dict(DEFAULT_SCHEDULES)
            self._default_mode = PollMode.DETACHED

    @property
    def is_enabled(self) -> bool:
        return self._enabled and self._provider is not None and self._provider.is_configured()

    def schedule_for(self, mode: PollMode) -> PollSchedule:
        return self._schedules[mode]

    def start(
        self,
        entry_id: UUID,
        script: str,
        mode: Optional[PollMode] = None,
        persona_id: Optional[str] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> Optional[asyncio.Task]:
        """
        Spawn the video job off the caller's control path.

        Returns:
            The background task, or None if video is disabled
        """
        if not self.is_enabled:
            VIDEO_JOBS_TOTAL.labels(outcome=VideoOutcome.SKIPPED.value).inc()
            logger.info("Video generation disabled or unconfigured, skipping", entry_id=str(entry_id))
            return None

        return self._registry.spawn(
            self.run(entry_id, script, mode or self._default_mode, persona_id, on_status),
            name=f"video-{entry_id}",
        )

    async def run(
        self,
        entry_id: UUID,
        script: str,
        mode: PollMode = PollMode.DETACHED,
        persona_id: Optional[str] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> VideoOutcome:
        """
        Submit once, poll, and patch the entry on completion.

        Returns:
            Final job outcome
        """
        outcome = await self._run(entry_id, script, mode, persona_id, on_status or (lambda _status: None))
        VIDEO_JOBS_TOTAL.labels(outcome=outcome.value).inc()
        logger.info("Video job finished", entry_id=str(entry_id), outcome=outcome.value, mode=mode.value)
        return outcome

    async def _run(
        self,
        entry_id: UUID,
        script: str,
        mode: PollMode,
        persona_id: Optional[str],
        on_status: StatusCallback,
    ) -> VideoOutcome:
        try:
            job = await self._provider.submit(script, persona_id)
        except TransportError as e:
            logger.warning("Video submission failed", entry_id=str(entry_id), error=str(e))
            on_status(VideoStatus.FAILED)
            return VideoOutcome.SUBMIT_FAILED

        on_status(job.status)
        if not job.status.is_terminal:
            job = await self._poll(job.job_id, self._schedules[mode], on_status)
            if job is None:
                logger.warning("Video polling exhausted", entry_id=str(entry_id), mode=mode.value)
                on_status(VideoStatus.FAILED)
                return VideoOutcome.EXHAUSTED

        if job.status == VideoStatus.FAILED:
            return VideoOutcome.FAILED

        if not job.download_ref:
            logger.warning("Completed video has no download reference", job_id=job.job_id)
            return VideoOutcome.FAILED

        try:
            await self._entry_store.update(entry_id, video_ref=job.download_ref)
        except PersistenceError as e:
            logger.error("Failed to attach video to entry", entry_id=str(entry_id), error=str(e))
            return VideoOutcome.PATCH_FAILED
        return VideoOutcome.COMPLETED

    async def _poll(
        self,
        job_id: str,
        schedule: PollSchedule,
        on_status: StatusCallback,
    ) -> Optional[VideoJob]:
        """
        Poll until the job is terminal or attempts run out.

        Transient status errors consume an attempt.

        Returns:
            Terminal job, or None if attempts were exhausted
        """

        async def fetch() -> VideoJob:
            job = await self._provider.status(job_id)
            on_status(job.status)
            return job

        retrying = AsyncRetrying(
            stop=stop_after_attempt(schedule.max_attempts),
            wait=wait_fixed(schedule.interval_seconds),
            retry=retry_if_result(_still_running) | retry_if_exception_type(TransportError),
            sleep=self._sleep,
        )

        ACTIVE_VIDEO_POLLS.inc()
        try:
            await self._sleep(schedule.interval_seconds)
            return await retrying(fetch)
        except RetryError:
            return None
        finally:
            ACTIVE_VIDEO_POLLS.dec()
