"""
Check-in Pipeline

Drives a CheckInSession through its lifecycle:

    idle -> recording -> processing -> reviewing -> generating -> complete

Stages within a session run strictly one after another:
    capture -> transcription -> crisis gate -> response -> voice note
    -> speech synthesis -> entry store -> (detached) video

Failure routing:
    CaptureError           -> idle
    transcription failure  -> idle (nothing durable exists yet)
    ValidationError        -> no transition
    SafetyHalt             -> stays in reviewing until re-consent
    generation/persistence -> reviewing, keeping audio, transcript, mood
    speech synthesis/video -> logged and swallowed

SAFETY-CRITICAL: The crisis gate runs before every transition out of
reviewing. A halt is raised before any other error handling and is
never caught inside this module.
"""

import asyncio
import time
from typing import Callable, Optional
from uuid import UUID

from aura.config.logging_config import bind_check_in_context, get_logger
from aura.domain.enums.check_in import CheckInState, MoodTag, Tone, VideoStatus
from aura.domain.exceptions import (
    CaptureError,
    InvalidTransitionError,
    PersistenceError,
    SafetyHalt,
    SessionNotFoundError,
    TransportError,
    ValidationError,
)
from aura.domain.models.check_in_session import CheckInSession
from aura.domain.models.entry import Entry
from aura.infrastructure.database.repositories.entry_store import EntryStore
from aura.infrastructure.metrics.prometheus_metrics import CHECK_INS_TOTAL
from aura.infrastructure.monitoring.sentry_integration import capture_safety_event
from aura.infrastructure.storage.audio_store import AudioStore
from aura.services.capture.recording_capture import RecordingCapture
from aura.services.orchestration.response_orchestrator import ResponseOrchestrator
from aura.services.safety.crisis_gate import CrisisGate
from aura.services.speech.speech_synthesis import SpeechSynthesisAdapter
from aura.services.transcription.transcription_gateway import TranscriptionGateway
from aura.services.video.video_coordinator import VideoGenerationCoordinator

logger = get_logger(__name__)


class CheckInPipeline:
    """
    Session registry and stage driver for voice check-ins.

    Usage:
        pipeline = CheckInPipeline(...)
        session = pipeline.create_session(user_id)
        await pipeline.toggle_recording(session.id)      # start
        pipeline.append_audio(session.id, chunk)
        await pipeline.toggle_recording(session.id)      # stop + transcribe
        pipeline.review(session.id, mood=MoodTag.CALM)
        await pipeline.generate(session.id)
    """

    def __init__(
        self,
        transcription: TranscriptionGateway,
        crisis_gate: CrisisGate,
        orchestrator: ResponseOrchestrator,
        speech: SpeechSynthesisAdapter,
        entry_store: EntryStore,
        audio_store: AudioStore,
        video: Optional[VideoGenerationCoordinator] = None,
        max_recording_bytes: int = 25 * 1024 * 1024,
        default_mime_type: str = "audio/webm",
        session_ttl_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transcription = transcription
        self._crisis_gate = crisis_gate
        self._orchestrator = orchestrator
        self._speech = speech
        self._entry_store = entry_store
        self._audio_store = audio_store
        self._video = video
        self._max_recording_bytes = max_recording_bytes
        self._default_mime_type = default_mime_type
        self._session_ttl = session_ttl_seconds
        self._clock = clock

        self._sessions: dict[UUID, CheckInSession] = {}
        self._touched: dict[UUID, float] = {}
        # Only sessions still in progress hold a capture and a lock
        self._captures: dict[UUID, RecordingCapture] = {}
        self._locks: dict[UUID, asyncio.Lock] = {}

    @property
    def orchestrator(self) -> ResponseOrchestrator:
        return self._orchestrator

    def use_orchestrator(self, orchestrator: ResponseOrchestrator) -> None:
        """Swap in a reconfigured orchestrator for subsequent generations."""
        self._orchestrator = orchestrator

    # =========================================================================
    # Session registry
    # =========================================================================

    def create_session(self, user_id: UUID, tone: Tone = Tone.CALM) -> CheckInSession:
        self.expire_sessions()
        session = CheckInSession(user_id=user_id, tone=tone)
        self._sessions[session.id] = session
        self._captures[session.id] = RecordingCapture(self._max_recording_bytes, self._default_mime_type)
        self._locks[session.id] = asyncio.Lock()
        self._touched[session.id] = self._clock()
        logger.info("Check-in session created", session_id=str(session.id), user_id=str(user_id))
        return session

    def get_session(self, session_id: UUID) -> CheckInSession:
        """
        Raises:
            SessionNotFoundError: If the session does not exist or has expired
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        if self._is_expired(session_id):
            self._discard(session_id)
            logger.info("Check-in session expired", session_id=str(session_id))
            raise SessionNotFoundError(str(session_id))
        self._touched[session_id] = self._clock()
        return session

    def reset(self, session_id: UUID) -> CheckInSession:
        """Discard a session and return a fresh idle one for the same user."""
        session = self.get_session(session_id)
        self._discard(session_id)
        logger.info("Check-in session reset", session_id=str(session_id))
        return self.create_session(session.user_id, session.tone)

    def expire_sessions(self) -> int:
        """
        Discard sessions untouched for longer than the TTL.

        Sessions with a stage in flight are skipped.

        Returns:
            Number of sessions discarded
        """
        expired = [sid for sid in self._sessions if self._is_expired(sid)]
        for session_id in expired:
            self._discard(session_id)
        if expired:
            logger.info("Expired idle check-in sessions", count=len(expired))
        return len(expired)

    def _is_expired(self, session_id: UUID) -> bool:
        lock = self._locks.get(session_id)
        if lock is not None and lock.locked():
            return False
        return self._clock() - self._touched.get(session_id, 0.0) > self._session_ttl

    def _discard(self, session_id: UUID) -> None:
        capture = self._captures.pop(session_id, None)
        if capture is not None:
            capture.abort()
        self._sessions.pop(session_id, None)
        self._touched.pop(session_id, None)
        self._locks.pop(session_id, None)

    def _release(self, session: CheckInSession) -> None:
        """Free recording resources once a session completes; the status snapshot stays."""
        session.audio = None
        self._captures.pop(session.id, None)
        self._locks.pop(session.id, None)

    def _lock_for(self, session: CheckInSession, target: CheckInState) -> asyncio.Lock:
        lock = self._locks.get(session.id)
        if lock is None:
            raise InvalidTransitionError(session.state.value, target.value)
        return lock

    @property
    def active_sessions(self) -> int:
        """Sessions still in progress; completed snapshots are not counted."""
        return sum(1 for s in self._sessions.values() if not s.is_terminal)

    @property
    def retained_sessions(self) -> int:
        return len(self._sessions)

    # =========================================================================
    # Recording
    # =========================================================================

    async def toggle_recording(
        self,
        session_id: UUID,
        mime_type: Optional[str] = None,
    ) -> CheckInSession:
        """
        Start recording from idle, or stop and transcribe while recording.

        Raises:
            InvalidTransitionError: From any other state
            CaptureError: If stopping yields no usable audio
        """
        session = self.get_session(session_id)
        async with self._lock_for(session, CheckInState.RECORDING):
            bind_check_in_context(str(session.id), str(session.user_id))
            if session.state == CheckInState.IDLE:
                self._start_recording(session, mime_type)
            elif session.state == CheckInState.RECORDING:
                await self._stop_and_transcribe(session)
            else:
                raise InvalidTransitionError(session.state.value, CheckInState.RECORDING.value)
        return session

    def _start_recording(self, session: CheckInSession, mime_type: Optional[str]) -> None:
        self._captures[session.id].start(mime_type)
        session.error_message = None
        session.transition_to(CheckInState.RECORDING)

    async def _stop_and_transcribe(self, session: CheckInSession) -> None:
        capture = self._captures[session.id]
        try:
            payload = capture.stop()
        except CaptureError as e:
            session.discard_recording()
            session.fail(str(e), CheckInState.IDLE)
            raise

        session.transition_to(CheckInState.PROCESSING)
        try:
            transcript = await self._transcription.transcribe(payload)
        except TransportError as e:
            logger.warning("Transcription failed", provider=e.provider, error=str(e))
            session.discard_recording()
            session.fail("We couldn't transcribe your recording. Please try again.", CheckInState.IDLE)
            CHECK_INS_TOTAL.labels(outcome="transcription_failed").inc()
            return
        except Exception as e:
            logger.error("Unexpected transcription failure", error=str(e), error_type=type(e).__name__)
            session.discard_recording()
            session.fail("Something went wrong. Please try again.", CheckInState.IDLE)
            CHECK_INS_TOTAL.labels(outcome="error").inc()
            raise

        session.audio = payload
        session.transcript = transcript
        session.transition_to(CheckInState.REVIEWING)

    def append_audio(self, session_id: UUID, chunk: bytes) -> int:
        """
        Add an audio chunk to the in-progress recording.

        Returns:
            Total bytes captured

        Raises:
            CaptureError: If not recording or the recording is too large
        """
        session = self.get_session(session_id)
        capture = self._captures.get(session_id)
        if capture is None:
            raise CaptureError("Not recording")
        try:
            return capture.append(chunk)
        except CaptureError as e:
            if session.state == CheckInState.RECORDING:
                capture.abort()
                session.discard_recording()
                session.fail(str(e), CheckInState.IDLE)
            raise

    def abort_recording(self, session_id: UUID) -> CheckInSession:
        """
        Discard the in-progress recording and return to idle.

        Raises:
            InvalidTransitionError: If not recording
        """
        session = self.get_session(session_id)
        if session.state != CheckInState.RECORDING:
            raise InvalidTransitionError(session.state.value, CheckInState.IDLE.value)
        self._captures[session_id].abort()
        session.discard_recording()
        session.transition_to(CheckInState.IDLE)
        logger.info("Recording aborted", session_id=str(session_id))
        return session

    # =========================================================================
    # Review
    # =========================================================================

    def review(
        self,
        session_id: UUID,
        mood: Optional[MoodTag] = None,
        transcript: Optional[str] = None,
    ) -> CheckInSession:
        """
        Set the mood and/or edit the transcript while reviewing.

        Raises:
            InvalidTransitionError: If not reviewing
            ValidationError: If the edited transcript is empty
        """
        session = self.get_session(session_id)
        if session.state != CheckInState.REVIEWING:
            raise InvalidTransitionError(session.state.value, CheckInState.REVIEWING.value)

        if transcript is not None:
            if not transcript.strip():
                raise ValidationError("Transcript cannot be empty", field="transcript")
            session.transcript = transcript.strip()
        if mood is not None:
            session.mood_tag = mood
        session.error_message = None
        return session

    def acknowledge_crisis(self, session_id: UUID) -> CheckInSession:
        """
        Record explicit re-consent to continue with the current transcript.

        Consent is only accepted after the crisis gate has halted on the
        current transcript, and is bound to that exact text; editing the
        transcript afterwards requires a new halt and a new consent.

        Raises:
            InvalidTransitionError: If not reviewing, or there is no halt
                on the current transcript to consent to
        """
        session = self.get_session(session_id)
        if session.state != CheckInState.REVIEWING:
            raise InvalidTransitionError(session.state.value, CheckInState.REVIEWING.value)
        if not session.awaiting_crisis_consent:
            raise InvalidTransitionError(session.state.value, "crisis_consent")

        session.crisis_consent_transcript = session.transcript
        logger.warning("Crisis halt acknowledged by user", session_id=str(session.id))
        return session

    # =========================================================================
    # Generation
    # =========================================================================

    async def generate(self, session_id: UUID) -> CheckInSession:
        """
        Generate, persist, and complete the check-in.

        Raises:
            InvalidTransitionError: If not reviewing
            ValidationError: If mood or transcript is missing
            SafetyHalt: If the crisis gate halts and there is no re-consent
            PersistenceError: If audio or the entry cannot be stored
        """
        session = self.get_session(session_id)
        async with self._lock_for(session, CheckInState.GENERATING):
            bind_check_in_context(str(session.id), str(session.user_id))
            self._check_ready(session)
            self._gate(session)

            session.transition_to(CheckInState.GENERATING)
            try:
                entry = await self._produce_entry(session)
            except (PersistenceError, TransportError) as e:
                logger.error("Check-in generation failed", error=str(e), error_type=type(e).__name__)
                session.fail("We couldn't save your check-in. Please try again.", CheckInState.REVIEWING)
                CHECK_INS_TOTAL.labels(outcome="persistence_failed").inc()
                raise
            except Exception as e:
                logger.error("Unexpected check-in failure", error=str(e), error_type=type(e).__name__)
                session.fail("Something went wrong. Please try again.", CheckInState.REVIEWING)
                CHECK_INS_TOTAL.labels(outcome="error").inc()
                raise

            session.entry_id = entry.id
            session.transition_to(CheckInState.COMPLETE)
            self._release(session)
            CHECK_INS_TOTAL.labels(outcome="complete").inc()
            logger.info("Check-in complete", entry_id=str(entry.id), source=session.source.value)

        self._start_video(session, entry)
        return session

    def _check_ready(self, session: CheckInSession) -> None:
        if session.state != CheckInState.REVIEWING:
            raise InvalidTransitionError(session.state.value, CheckInState.GENERATING.value)
        if session.mood_tag is None:
            raise ValidationError("Please select a mood before continuing", field="mood_tag")
        if not session.transcript:
            raise ValidationError("Transcript is required", field="transcript")

    def _gate(self, session: CheckInSession) -> None:
        decision = self._crisis_gate.assess(session.transcript, session.user_id)
        session.crisis_decision = decision
        if not decision.should_halt:
            return
        if not session.has_consent_for(session.transcript):
            session.halted_transcript = session.transcript
            CHECK_INS_TOTAL.labels(outcome="halted").inc()
            capture_safety_event(
                "Check-in halted by crisis gate",
                severity=decision.severity,
                session_id=str(session.id),
            )
            raise SafetyHalt(decision)

    async def _produce_entry(self, session: CheckInSession) -> Entry:
        response = await self._orchestrator.generate(
            session.mood_tag,
            session.transcript,
            session.tone,
            user_id=session.user_id,
        )
        session.response_text = response.text
        session.confidence = response.confidence
        session.ai_confidence = response.ai_confidence
        session.source = response.source
        session.suggestions = list(response.suggestions)
        session.video_script = response.video_script

        voice_note_ref = None
        if session.audio is not None:
            voice_note_ref = await self._audio_store.save(
                session.user_id, session.audio.data, session.audio.extension, "voice_note"
            )

        response_audio_ref = await self._store_response_audio(session, response.text)

        entry = Entry(
            user_id=session.user_id,
            mood_tag=session.mood_tag,
            transcript=session.transcript,
            text_summary=response.text,
            voice_note_ref=voice_note_ref,
            ai_response_audio_ref=response_audio_ref,
        )
        await self._entry_store.create(entry)
        return entry

    async def _store_response_audio(self, session: CheckInSession, text: str) -> Optional[str]:
        audio = await self._speech.synthesize(text, session.tone)
        if audio is None:
            return None
        try:
            return await self._audio_store.save(session.user_id, audio, "mp3", "response")
        except PersistenceError as e:
            logger.warning("Could not store synthesized audio", error=str(e))
            return None

    def _start_video(self, session: CheckInSession, entry: Entry) -> None:
        if self._video is None or not self._video.is_enabled or not session.video_script:
            return

        def on_status(status: VideoStatus) -> None:
            session.video_status = status

        session.video_status = VideoStatus.PENDING
        if self._video.start(entry.id, session.video_script, on_status=on_status) is None:
            session.video_status = None
