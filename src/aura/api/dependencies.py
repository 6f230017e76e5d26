"""
API Dependencies

Builds the service graph once per application and exposes it to
endpoints through FastAPI dependencies. Tests build their own
container with fake providers and in-memory stores.
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from fastapi import Request

from aura.config.logging_config import get_logger
from aura.config.settings import Settings
from aura.infrastructure.audio.speech_provider import ElevenLabsSpeechProvider, SpeechSynthesisProvider
from aura.infrastructure.audio.transcription_provider import (
    TranscriptionProvider,
    WhisperTranscriptionProvider,
)
from aura.infrastructure.database.connection import DatabaseManager
from aura.infrastructure.database.repositories.crisis_flag_store import (
    CrisisFlagStore,
    InMemoryCrisisFlagStore,
    SqlAlchemyCrisisFlagStore,
)
from aura.infrastructure.database.repositories.entry_store import (
    EntryStore,
    InMemoryEntryStore,
    SqlAlchemyEntryStore,
)
from aura.infrastructure.llm.provider import LLMProvider
from aura.infrastructure.llm.provider_factory import create_llm_provider
from aura.infrastructure.storage.audio_store import AudioStore, LocalAudioStore
from aura.infrastructure.video.tavus_provider import TavusVideoProvider, VideoGenerationProvider
from aura.services.analytics.analytics_cache import AnalyticsCache
from aura.services.background import BackgroundTaskRegistry
from aura.services.orchestration.check_in_pipeline import CheckInPipeline
from aura.services.orchestration.response_orchestrator import OrchestratorConfig, ResponseOrchestrator
from aura.services.prompt.prompt_builder import PromptBuilder
from aura.services.safety.crisis_gate import CrisisGate, CrisisPolicy
from aura.services.safety.crisis_resources import CrisisResourceDirectory
from aura.services.speech.speech_synthesis import SpeechSynthesisAdapter
from aura.services.transcription.transcription_gateway import TranscriptionGateway
from aura.services.video.video_coordinator import VideoGenerationCoordinator

logger = get_logger(__name__)


@dataclass
class AppContainer:
    """Everything an endpoint may need, wired together."""

    settings: Settings
    registry: BackgroundTaskRegistry
    entry_store: EntryStore
    crisis_flag_store: CrisisFlagStore
    audio_store: AudioStore
    crisis_resources: CrisisResourceDirectory
    analytics: AnalyticsCache
    video: VideoGenerationCoordinator
    pipeline: CheckInPipeline
    db: Optional[DatabaseManager] = None

    def reconfigure_orchestrator(self, **changes) -> OrchestratorConfig:
        """
        Apply new orchestrator policy to subsequent generations.

        Check-ins already generating keep the orchestrator they started with.

        Raises:
            ValueError: If the resulting config is out of range
        """
        orchestrator = self.pipeline.orchestrator.reconfigure(**changes)
        self.pipeline.use_orchestrator(orchestrator)
        logger.info("Orchestrator reconfigured", **changes)
        return orchestrator.config


def build_container(
    settings: Settings,
    *,
    llm_provider: Optional[LLMProvider] = None,
    transcription_provider: Optional[TranscriptionProvider] = None,
    speech_provider: Optional[SpeechSynthesisProvider] = None,
    video_provider: Optional[VideoGenerationProvider] = None,
    entry_store: Optional[EntryStore] = None,
    crisis_flag_store: Optional[CrisisFlagStore] = None,
    audio_store: Optional[AudioStore] = None,
    db: Optional[DatabaseManager] = None,
    rng: Callable[[], float] = random.random,
    video_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    session_clock: Callable[[], float] = time.monotonic,
) -> AppContainer:
    """
    Wire the check-in service graph.

    Providers and stores default to the ones named by settings;
    any of them can be replaced.
    """
    if settings.storage.entry_backend == "database" and db is None:
        db = DatabaseManager(settings.database, echo=settings.debug)

    if entry_store is None:
        entry_store = SqlAlchemyEntryStore(db) if db is not None else InMemoryEntryStore()
    if crisis_flag_store is None:
        crisis_flag_store = SqlAlchemyCrisisFlagStore(db) if db is not None else InMemoryCrisisFlagStore()
    if audio_store is None:
        audio_store = LocalAudioStore(settings.storage.audio_dir)

    registry = BackgroundTaskRegistry()
    analytics = AnalyticsCache(entry_store, settings.analytics)

    orchestrator = ResponseOrchestrator(
        provider=llm_provider or create_llm_provider(settings),
        config=OrchestratorConfig.from_settings(settings.orchestrator),
        prompt_builder=PromptBuilder(),
        rng=rng,
    )
    video = VideoGenerationCoordinator(
        provider=video_provider or TavusVideoProvider(settings.tavus),
        entry_store=entry_store,
        registry=registry,
        settings=settings.video,
        sleep=video_sleep,
    )
    pipeline = CheckInPipeline(
        transcription=TranscriptionGateway(
            transcription_provider or WhisperTranscriptionProvider(settings.openai)
        ),
        crisis_gate=CrisisGate(
            policy=CrisisPolicy.from_settings(settings.crisis),
            flag_store=crisis_flag_store,
            registry=registry,
        ),
        orchestrator=orchestrator,
        speech=SpeechSynthesisAdapter(speech_provider or ElevenLabsSpeechProvider(settings.elevenlabs)),
        entry_store=entry_store,
        audio_store=audio_store,
        video=video,
        max_recording_bytes=settings.capture.max_recording_bytes,
        default_mime_type=settings.capture.default_mime_type,
        session_ttl_seconds=settings.capture.session_ttl_seconds,
        clock=session_clock,
    )

    logger.info(
        "Service container built",
        entry_backend="database" if db is not None else "memory",
        video_enabled=video.is_enabled,
    )
    return AppContainer(
        settings=settings,
        registry=registry,
        entry_store=entry_store,
        crisis_flag_store=crisis_flag_store,
        audio_store=audio_store,
        crisis_resources=CrisisResourceDirectory(),
        analytics=analytics,
        video=video,
        pipeline=pipeline,
        db=db,
    )


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_pipeline(request: Request) -> CheckInPipeline:
    return get_container(request).pipeline
