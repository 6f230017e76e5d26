"""
Check-in Session Domain Model

Transient record of one recording attempt as it moves from raw
audio to a persisted entry. Sessions are never stored. Audio is
released on completion, leaving a status snapshot that is discarded
on reset or once the session has been untouched past its TTL.

State transitions are forward-only. The only backward moves are
aborting a recording and recovering from ERROR to IDLE or REVIEWING.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from aura.domain.enums.check_in import CheckInState, MoodTag, ResponseSource, Tone, VideoStatus
from aura.domain.exceptions import InvalidTransitionError
from aura.domain.models.audio import AudioPayload
from aura.domain.models.entry import utc_now

if TYPE_CHECKING:
    from aura.services.safety.crisis_gate import CrisisDecision


ALLOWED_TRANSITIONS: dict[CheckInState, frozenset[CheckInState]] = {
    CheckInState.IDLE: frozenset({CheckInState.RECORDING}),
    # IDLE from RECORDING is an abort; the audio is discarded
    CheckInState.RECORDING: frozenset({CheckInState.PROCESSING, CheckInState.IDLE}),
    CheckInState.PROCESSING: frozenset({CheckInState.REVIEWING}),
    CheckInState.REVIEWING: frozenset({CheckInState.GENERATING}),
    CheckInState.GENERATING: frozenset({CheckInState.COMPLETE}),
    CheckInState.COMPLETE: frozenset(),
    CheckInState.ERROR: frozenset({CheckInState.IDLE, CheckInState.REVIEWING}),
}


@dataclass
class CheckInSession:
    """
    A single voice check-in in progress.

    Attributes:
        id: Session identifier
        user_id: Owning user
        tone: Preferred response tone
        state: Current lifecycle state
        audio: Finalized recording, kept across generation retries
        transcript: Transcript, editable while reviewing
        mood_tag: Mood chosen while reviewing
        response_text: Final therapeutic response
        confidence: Confidence of the final response
        ai_confidence: Confidence of the raw AI candidate, if any
        source: Where the response came from
        suggestions: Up to three follow-up suggestions
        video_script: Script submitted for video generation
        video_status: Last known video job status
        entry_id: Persisted entry, once generation succeeds
        crisis_decision: Last crisis gate decision
        halted_transcript: Transcript the crisis gate last halted on
        crisis_consent_transcript: Transcript the user re-consented for
        error_message: Message from the last recovered failure
        state_history: Every state the session has passed through
    """

    user_id: UUID
    tone: Tone = Tone.CALM
    id: UUID = field(default_factory=uuid4)
    state: CheckInState = CheckInState.IDLE

    audio: Optional[AudioPayload] = None
    transcript: Optional[str] = None
    mood_tag: Optional[MoodTag] = None

    response_text: Optional[str] = None
    confidence: Optional[float] = None
    ai_confidence: Optional[float] = None
    source: Optional[ResponseSource] = None
    suggestions: list[str] = field(default_factory=list)
    video_script: Optional[str] = None
    video_status: Optional[VideoStatus] = None
    entry_id: Optional[UUID] = None

    crisis_decision: Optional["CrisisDecision"] = None
    halted_transcript: Optional[str] = None
    crisis_consent_transcript: Optional[str] = None
    error_message: Optional[str] = None

    state_history: list[CheckInState] = field(default_factory=lambda: [CheckInState.IDLE])
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def can_transition_to(self, target: CheckInState) -> bool:
        if target == CheckInState.ERROR:
            return self.state not in (CheckInState.COMPLETE, CheckInState.ERROR)
        return target in ALLOWED_TRANSITIONS[self.state]

    def transition_to(self, target: CheckInState) -> None:
        """
        Move to a new state.

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target
        self.state_history.append(target)
        self.updated_at = utc_now()

    def fail(self, message: str, recover_to: CheckInState) -> None:
        """
        Route through ERROR and recover.

        Args:
            message: User-facing description of the failure
            recover_to: IDLE or REVIEWING
        """
        self.transition_to(CheckInState.ERROR)
        self.error_message = message
        self.transition_to(recover_to)

    def discard_recording(self) -> None:
        """Drop everything derived from the current recording."""
        self.audio = None
        self.transcript = None
        self.mood_tag = None
        self.crisis_decision = None
        self.halted_transcript = None
        self.crisis_consent_transcript = None

    def has_consent_for(self, transcript: str) -> bool:
        return self.crisis_consent_transcript is not None and self.crisis_consent_transcript == transcript

    @property
    def awaiting_crisis_consent(self) -> bool:
        """True only after a halt on the transcript as it stands now."""
        return (
            self.crisis_decision is not None
            and self.crisis_decision.should_halt
            and self.halted_transcript is not None
            and self.halted_transcript == self.transcript
        )

    @property
    def is_terminal(self) -> bool:
        return self.state == CheckInState.COMPLETE

    def to_dict(self) -> dict:
        """Serialize session status (audio bytes excluded)."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "state": self.state.value,
            "tone": self.tone.value,
            "has_audio": self.audio is not None,
            "transcript": self.transcript,
            "mood_tag": self.mood_tag.value if self.mood_tag else None,
            "response_text": self.response_text,
            "confidence": self.confidence,
            "ai_confidence": self.ai_confidence,
            "source": self.source.value if self.source else None,
            "suggestions": list(self.suggestions),
            "video_status": self.video_status.value if self.video_status else None,
            "entry_id": str(self.entry_id) if self.entry_id else None,
            "crisis": self.crisis_decision.to_dict() if self.crisis_decision else None,
            "error_message": self.error_message,
            "state_history": [s.value for s in self.state_history],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
