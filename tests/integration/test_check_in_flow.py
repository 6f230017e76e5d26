"""
Integration Tests for the Check-in Flow

Runs complete check-ins through the wired service graph with fake
providers and in-memory stores.

SAFETY-CRITICAL: The halt tests verify that a high-severity transcript
never reaches generation without explicit re-consent.
"""

import asyncio

import pytest

from aura.api.dependencies import AppContainer, build_container
from aura.config.settings import VideoSettings
from aura.domain.enums.check_in import CheckInState, MoodTag, ResponseSource, VideoStatus
from aura.domain.exceptions import (
    CaptureError,
    InvalidTransitionError,
    PersistenceError,
    SafetyHalt,
    SessionNotFoundError,
    ValidationError,
)

from conftest import (
    FailingEntryStore,
    FakeLLMProvider,
    FakeSpeechProvider,
    FakeTranscriptionProvider,
    FakeVideoProvider,
    SleepRecorder,
    provider_error,
    transport_error,
)


CONFIDENT_TEXT = (
    "It sounds like work has been weighing on you. "
    "Your feelings are valid and it makes sense to feel stretched. "
    "Remember to be gentle with yourself tonight."
)
CRISIS_TEXT = "I feel hopeless and worthless, I want to die and I can't go on"


@pytest.fixture
def make_container(test_settings):
    def _make(
        transcript: str = "I've been anxious about my job interview",
        llm_text: str = CONFIDENT_TEXT,
        **overrides,
    ) -> AppContainer:
        options = dict(
            llm_provider=FakeLLMProvider(text=llm_text),
            transcription_provider=FakeTranscriptionProvider(text=transcript),
            speech_provider=FakeSpeechProvider(),
            video_provider=FakeVideoProvider([VideoStatus.GENERATING, VideoStatus.COMPLETED]),
            rng=lambda: 0.0,
            video_sleep=SleepRecorder(),
        )
        options.update(overrides)
        return build_container(test_settings, **options)

    return _make


async def record(container: AppContainer, session_id, audio: bytes = b"\x1aE\xdf\xa3voice") -> None:
    pipeline = container.pipeline
    await pipeline.toggle_recording(session_id)
    pipeline.append_audio(session_id, audio)
    await pipeline.toggle_recording(session_id)


class TestHappyPath:
    """Full check-in from idle to complete."""

    async def test_complete_check_in(self, make_container, user_id) -> None:
        container = make_container()
        pipeline = container.pipeline
        session = pipeline.create_session(user_id)

        await record(container, session.id)
        assert session.state == CheckInState.REVIEWING
        assert session.transcript == "I've been anxious about my job interview"

        pipeline.review(session.id, mood=MoodTag.ANXIOUS)
        await pipeline.generate(session.id)

        assert session.state == CheckInState.COMPLETE
        assert session.source == ResponseSource.AI
        assert session.response_text == CONFIDENT_TEXT
        assert 0 < len(session.suggestions) <= 3
        assert session.crisis_decision.severity == 0
        assert session.state_history == [
            CheckInState.IDLE,
            CheckInState.RECORDING,
            CheckInState.PROCESSING,
            CheckInState.REVIEWING,
            CheckInState.GENERATING,
            CheckInState.COMPLETE,
        ]

        entry = await container.entry_store.get(session.entry_id)
        assert entry.text_summary == CONFIDENT_TEXT
        assert entry.mood_tag == MoodTag.ANXIOUS
        assert entry.voice_note_ref.startswith("local://")
        assert entry.ai_response_audio_ref.endswith(".mp3")
        assert await container.audio_store.load(entry.voice_note_ref) == b"\x1aE\xdf\xa3voice"

    async def test_video_attached_in_background(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        await container.pipeline.generate(session.id)
        assert session.video_status in (VideoStatus.PENDING, VideoStatus.GENERATING)
        await container.registry.wait_idle()

        entry = await container.entry_store.get(session.entry_id)
        assert entry.video_ref == "https://videos.example/v-1.mp4"
        assert session.video_status == VideoStatus.COMPLETED

    async def test_video_failure_does_not_affect_entry(self, make_container, user_id) -> None:
        container = make_container(video_provider=FakeVideoProvider([], submit_error=transport_error()))
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        await container.pipeline.generate(session.id)
        await container.registry.wait_idle()

        assert session.state == CheckInState.COMPLETE
        assert session.video_status == VideoStatus.FAILED
        assert (await container.entry_store.get(session.entry_id)).video_ref is None

    async def test_video_disabled(self, make_container, test_settings, user_id) -> None:
        test_settings.video = VideoSettings(enabled=False)
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        await container.pipeline.generate(session.id)

        assert session.video_status is None
        assert container.registry.active_count == 0

    async def test_provider_failure_uses_template(self, make_container, user_id) -> None:
        container = make_container(llm_provider=FakeLLMProvider(error=provider_error()))
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.STRESSED)

        await container.pipeline.generate(session.id)

        assert session.state == CheckInState.COMPLETE
        assert session.source == ResponseSource.TEMPLATE
        assert session.confidence == 0.85

    async def test_speech_failure_still_completes(self, make_container, user_id) -> None:
        container = make_container(speech_provider=FakeSpeechProvider(error=transport_error()))
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        await container.pipeline.generate(session.id)

        entry = await container.entry_store.get(session.entry_id)
        assert session.state == CheckInState.COMPLETE
        assert entry.ai_response_audio_ref is None

    async def test_edited_transcript_is_saved(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)

        container.pipeline.review(session.id, mood=MoodTag.GRATEFUL, transcript="  Thankful for my sister  ")
        await container.pipeline.generate(session.id)

        entry = await container.entry_store.get(session.entry_id)
        assert entry.transcript == "Thankful for my sister"

    async def test_dashboard_reflects_new_entry(self, make_container, user_id) -> None:
        container = make_container()
        before = await container.analytics.get_dashboard_data(user_id)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.HAPPY)

        await container.pipeline.generate(session.id)
        after = await container.analytics.get_dashboard_data(user_id)

        assert before.total_entries == 0
        assert after.total_entries == 1
        assert after.streak.current == 1
        assert after.dominant_mood == MoodTag.HAPPY


class TestSafetyHalt:
    """SAFETY-CRITICAL: crisis gate halts before generation."""

    async def test_halt_keeps_session_in_review(self, make_container, user_id) -> None:
        llm = FakeLLMProvider(text=CONFIDENT_TEXT)
        container = make_container(transcript=CRISIS_TEXT, llm_provider=llm)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)

        with pytest.raises(SafetyHalt) as exc_info:
            await container.pipeline.generate(session.id)

        assert exc_info.value.decision.severity == 8
        assert session.state == CheckInState.REVIEWING
        assert session.crisis_decision.should_halt
        assert session.entry_id is None
        assert llm.prompts == []
        assert await container.entry_store.query(user_id) == []

    async def test_halt_repeats_until_consent(self, make_container, user_id) -> None:
        container = make_container(transcript=CRISIS_TEXT)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)

        for _ in range(2):
            with pytest.raises(SafetyHalt):
                await container.pipeline.generate(session.id)

        container.pipeline.acknowledge_crisis(session.id)
        await container.pipeline.generate(session.id)

        assert session.state == CheckInState.COMPLETE
        assert session.crisis_decision.should_halt

    async def test_editing_transcript_voids_consent(self, make_container, user_id) -> None:
        container = make_container(transcript=CRISIS_TEXT)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)
        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)
        container.pipeline.acknowledge_crisis(session.id)

        container.pipeline.review(session.id, transcript=CRISIS_TEXT + " tonight")

        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)
        assert session.state == CheckInState.REVIEWING

    async def test_consent_before_halt_rejected(self, make_container, user_id) -> None:
        llm = FakeLLMProvider(text=CONFIDENT_TEXT)
        container = make_container(transcript=CRISIS_TEXT, llm_provider=llm)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)

        with pytest.raises(InvalidTransitionError):
            container.pipeline.acknowledge_crisis(session.id)
        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)

        assert session.state == CheckInState.REVIEWING
        assert llm.prompts == []

    async def test_consent_requires_halt_on_current_transcript(self, make_container, user_id) -> None:
        container = make_container(transcript=CRISIS_TEXT)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)
        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)

        container.pipeline.review(session.id, transcript=CRISIS_TEXT + " tonight")

        with pytest.raises(InvalidTransitionError):
            container.pipeline.acknowledge_crisis(session.id)
        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)

    async def test_consent_rejected_without_crisis(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        with pytest.raises(InvalidTransitionError):
            container.pipeline.acknowledge_crisis(session.id)

    async def test_crisis_flag_recorded(self, make_container, user_id) -> None:
        container = make_container(transcript=CRISIS_TEXT)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)

        with pytest.raises(SafetyHalt):
            await container.pipeline.generate(session.id)
        await container.registry.wait_idle()

        flags = await container.crisis_flag_store.list_for_user(user_id)
        assert len(flags) == 1
        assert flags[0].severity_score == 8

    async def test_moderate_severity_continues(self, make_container, user_id) -> None:
        container = make_container(transcript="I feel hopeless about work lately")
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.SAD)

        await container.pipeline.generate(session.id)

        assert session.state == CheckInState.COMPLETE
        assert session.crisis_decision.needs_resources
        assert not session.crisis_decision.should_halt


class TestFailureRecovery:
    """Failures route the session back to a recoverable state."""

    async def test_persistence_failure_returns_to_review(self, make_container, user_id) -> None:
        store = FailingEntryStore()
        container = make_container(entry_store=store)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        with pytest.raises(PersistenceError):
            await container.pipeline.generate(session.id)

        assert session.state == CheckInState.REVIEWING
        assert session.error_message == "We couldn't save your check-in. Please try again."
        assert session.audio is not None
        assert session.mood_tag == MoodTag.CALM
        assert CheckInState.ERROR in session.state_history

        store.fail_inserts = False
        await container.pipeline.generate(session.id)

        assert session.state == CheckInState.COMPLETE
        assert len(await store.query(user_id)) == 1

    async def test_transcription_failure_returns_to_idle(self, make_container, user_id) -> None:
        container = make_container(transcription_provider=FakeTranscriptionProvider(error=transport_error()))
        session = container.pipeline.create_session(user_id)

        await record(container, session.id)

        assert session.state == CheckInState.IDLE
        assert session.error_message == "We couldn't transcribe your recording. Please try again."
        assert session.audio is None
        assert session.transcript is None

        await container.pipeline.toggle_recording(session.id)
        assert session.state == CheckInState.RECORDING
        assert session.error_message is None

    async def test_unexpected_transcription_error_returns_to_idle(self, make_container, user_id) -> None:
        container = make_container(
            transcription_provider=FakeTranscriptionProvider(error=RuntimeError("decoder crashed"))
        )
        session = container.pipeline.create_session(user_id)

        with pytest.raises(RuntimeError):
            await record(container, session.id)

        assert session.state == CheckInState.IDLE
        assert session.error_message == "Something went wrong. Please try again."
        assert session.audio is None
        await container.pipeline.toggle_recording(session.id)
        assert session.state == CheckInState.RECORDING

    async def test_empty_recording_returns_to_idle(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await container.pipeline.toggle_recording(session.id)

        with pytest.raises(CaptureError):
            await container.pipeline.toggle_recording(session.id)

        assert session.state == CheckInState.IDLE

    async def test_oversized_recording_returns_to_idle(self, make_container, test_settings, user_id) -> None:
        test_settings.capture.max_recording_bytes = 4
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await container.pipeline.toggle_recording(session.id)

        with pytest.raises(CaptureError):
            container.pipeline.append_audio(session.id, b"too large")

        assert session.state == CheckInState.IDLE

    async def test_abort_discards_recording(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await container.pipeline.toggle_recording(session.id)
        container.pipeline.append_audio(session.id, b"partial")

        container.pipeline.abort_recording(session.id)

        assert session.state == CheckInState.IDLE
        await record(container, session.id, b"fresh")
        assert session.audio.data == b"fresh"


class TestGuards:
    """Invalid requests leave the session untouched."""

    async def test_generate_requires_mood(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)

        with pytest.raises(ValidationError) as exc_info:
            await container.pipeline.generate(session.id)

        assert exc_info.value.field == "mood_tag"
        assert session.state == CheckInState.REVIEWING

    async def test_empty_transcript_rejected(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)

        with pytest.raises(ValidationError):
            container.pipeline.review(session.id, transcript="   ")

        assert session.transcript == "I've been anxious about my job interview"

    async def test_generate_from_idle_rejected(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)

        with pytest.raises(InvalidTransitionError):
            await container.pipeline.generate(session.id)

    async def test_concurrent_generate_runs_once(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)

        results = await asyncio.gather(
            container.pipeline.generate(session.id),
            container.pipeline.generate(session.id),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InvalidTransitionError) for r in results) == 1
        assert len(await container.entry_store.query(user_id)) == 1

    async def test_reset_replaces_session(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)

        fresh = container.pipeline.reset(session.id)

        assert fresh.id != session.id
        assert fresh.state == CheckInState.IDLE
        assert fresh.user_id == user_id
        with pytest.raises(SessionNotFoundError):
            container.pipeline.get_session(session.id)


class FakeClock:
    def __init__(self) -> None:
        self.now = 5000.0

    def __call__(self) -> float:
        return self.now


class TestSessionLifecycle:
    """Completed and abandoned sessions do not accumulate."""

    async def test_completion_releases_recording(self, make_container, user_id) -> None:
        container = make_container()
        pipeline = container.pipeline

        for _ in range(5):
            session = pipeline.create_session(user_id)
            await record(container, session.id, b"\x00" * 100_000)
            pipeline.review(session.id, mood=MoodTag.CALM)
            await pipeline.generate(session.id)

            assert session.state == CheckInState.COMPLETE
            assert session.audio is None

        assert pipeline.active_sessions == 0
        assert pipeline.get_session(session.id).entry_id is not None

    async def test_completed_session_rejects_further_stages(self, make_container, user_id) -> None:
        container = make_container()
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)
        await container.pipeline.generate(session.id)

        with pytest.raises(InvalidTransitionError):
            await container.pipeline.toggle_recording(session.id)
        with pytest.raises(InvalidTransitionError):
            await container.pipeline.generate(session.id)
        with pytest.raises(CaptureError):
            container.pipeline.append_audio(session.id, b"late chunk")

    async def test_untouched_session_expires(self, make_container, test_settings, user_id) -> None:
        clock = FakeClock()
        container = make_container(session_clock=clock)
        session = container.pipeline.create_session(user_id)
        await container.pipeline.toggle_recording(session.id)
        container.pipeline.append_audio(session.id, b"partial")

        clock.now += test_settings.capture.session_ttl_seconds + 1

        with pytest.raises(SessionNotFoundError):
            container.pipeline.get_session(session.id)
        assert container.pipeline.retained_sessions == 0

    async def test_expiry_spares_recent_sessions(self, make_container, test_settings, user_id) -> None:
        ttl = test_settings.capture.session_ttl_seconds
        clock = FakeClock()
        container = make_container(session_clock=clock)
        stale = container.pipeline.create_session(user_id)
        recent = container.pipeline.create_session(user_id)

        clock.now += ttl / 2
        container.pipeline.get_session(recent.id)
        clock.now += ttl / 2 + 1

        assert container.pipeline.expire_sessions() == 1
        assert container.pipeline.retained_sessions == 1
        assert container.pipeline.get_session(recent.id) is recent
        with pytest.raises(SessionNotFoundError):
            container.pipeline.get_session(stale.id)

    async def test_completed_snapshot_expires(self, make_container, test_settings, user_id) -> None:
        clock = FakeClock()
        container = make_container(session_clock=clock)
        session = container.pipeline.create_session(user_id)
        await record(container, session.id)
        container.pipeline.review(session.id, mood=MoodTag.CALM)
        await container.pipeline.generate(session.id)
        await container.registry.wait_idle()

        clock.now += test_settings.capture.session_ttl_seconds + 1
        container.pipeline.create_session(user_id)

        assert container.pipeline.retained_sessions == 1
        with pytest.raises(SessionNotFoundError):
            container.pipeline.get_session(session.id)
