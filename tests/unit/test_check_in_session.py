"""
Unit Tests for the Check-in Session State Machine

Forward-only lifecycle with two backward moves: aborting a
recording and recovering from ERROR.
"""

import pytest

from aura.domain.enums.check_in import CheckInState, MoodTag
from aura.domain.exceptions import InvalidTransitionError
from aura.domain.models.audio import AudioPayload
from aura.domain.models.check_in_session import CheckInSession
from aura.services.safety.crisis_gate import CrisisAction, CrisisDecision


FORWARD = [
    CheckInState.RECORDING,
    CheckInState.PROCESSING,
    CheckInState.REVIEWING,
    CheckInState.GENERATING,
    CheckInState.COMPLETE,
]


class TestCheckInSession:
    """Test suite for CheckInSession."""

    @pytest.fixture
    def session(self, user_id) -> CheckInSession:
        return CheckInSession(user_id=user_id)

    def test_starts_idle(self, session: CheckInSession) -> None:
        assert session.state == CheckInState.IDLE
        assert session.state_history == [CheckInState.IDLE]

    def test_full_forward_path(self, session: CheckInSession) -> None:
        for state in FORWARD:
            session.transition_to(state)

        assert session.is_terminal
        assert session.state_history == [CheckInState.IDLE, *FORWARD]

    def test_cannot_skip_states(self, session: CheckInSession) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            session.transition_to(CheckInState.GENERATING)

        assert exc_info.value.current == "idle"
        assert exc_info.value.requested == "generating"
        assert session.state == CheckInState.IDLE

    def test_cannot_move_backwards(self, session: CheckInSession) -> None:
        session.transition_to(CheckInState.RECORDING)
        session.transition_to(CheckInState.PROCESSING)
        session.transition_to(CheckInState.REVIEWING)

        with pytest.raises(InvalidTransitionError):
            session.transition_to(CheckInState.PROCESSING)

    def test_abort_returns_to_idle(self, session: CheckInSession) -> None:
        session.transition_to(CheckInState.RECORDING)
        session.transition_to(CheckInState.IDLE)

        assert session.state == CheckInState.IDLE

    def test_complete_is_terminal(self, session: CheckInSession) -> None:
        for state in FORWARD:
            session.transition_to(state)

        assert not session.can_transition_to(CheckInState.ERROR)
        assert not session.can_transition_to(CheckInState.IDLE)

    def test_fail_recovers_through_error(self, session: CheckInSession) -> None:
        session.transition_to(CheckInState.RECORDING)
        session.transition_to(CheckInState.PROCESSING)

        session.fail("We couldn't transcribe your recording.", CheckInState.IDLE)

        assert session.state == CheckInState.IDLE
        assert session.error_message == "We couldn't transcribe your recording."
        assert session.state_history[-2:] == [CheckInState.ERROR, CheckInState.IDLE]

    def test_error_cannot_recover_to_generating(self, session: CheckInSession) -> None:
        session.transition_to(CheckInState.ERROR)

        with pytest.raises(InvalidTransitionError):
            session.transition_to(CheckInState.GENERATING)

    def test_discard_recording_clears_derived_state(self, session: CheckInSession) -> None:
        session.audio = AudioPayload(data=b"abc", mime_type="audio/webm")
        session.transcript = "hello"
        session.mood_tag = MoodTag.CALM
        session.crisis_consent_transcript = "hello"

        session.discard_recording()

        assert session.audio is None
        assert session.transcript is None
        assert session.mood_tag is None
        assert session.crisis_consent_transcript is None

    def test_awaiting_consent_only_after_halt_on_current_text(self, session: CheckInSession) -> None:
        session.transcript = "I can't go on"
        assert not session.awaiting_crisis_consent

        session.crisis_decision = CrisisDecision(severity=8, action=CrisisAction.HALT)
        assert not session.awaiting_crisis_consent

        session.halted_transcript = "I can't go on"
        assert session.awaiting_crisis_consent

        session.transcript = "I can't go on tonight"
        assert not session.awaiting_crisis_consent

    def test_consent_is_bound_to_transcript(self, session: CheckInSession) -> None:
        session.crisis_consent_transcript = "I can't go on"

        assert session.has_consent_for("I can't go on")
        assert not session.has_consent_for("I can't go on anymore")

    def test_to_dict_excludes_audio_bytes(self, session: CheckInSession) -> None:
        session.audio = AudioPayload(data=b"secret-audio", mime_type="audio/webm")

        data = session.to_dict()

        assert data["has_audio"] is True
        assert "secret-audio" not in str(data)
        assert data["state"] == "idle"
