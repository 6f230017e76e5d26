"""
Check-in Error Taxonomy

Every failure raised along the check-in pipeline derives from
CheckInError. The pipeline decides where each class routes the
session; the API layer maps each class to an HTTP status.

SafetyHalt is deliberate control flow, not a failure. It outranks
every other class and is never retried or swallowed.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from aura.services.safety.crisis_gate import CrisisDecision


class CheckInError(Exception):
    """Base exception for check-in pipeline errors."""


class CaptureError(CheckInError):
    """Recording device, permission, or capture misuse."""


class ValidationError(CheckInError):
    """A required session field is missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(CheckInError):
    """The session state does not allow the requested operation."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class TransportError(CheckInError):
    """
    An external provider call failed.

    Attributes:
        provider: Provider name for logging
        is_retryable: Whether the caller may reasonably retry
        original_error: Underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        provider: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.is_retryable = is_retryable
        self.original_error = original_error


class PersistenceError(CheckInError):
    """Entry store write failed."""


class SafetyHalt(CheckInError):
    """
    Crisis severity reached the halt threshold.

    The pipeline must not continue until the user explicitly
    re-consents for the same transcript.
    """

    def __init__(self, decision: "CrisisDecision") -> None:
        super().__init__(
            f"Check-in halted for safety (severity {decision.severity}/10)"
        )
        self.decision = decision


class SessionNotFoundError(CheckInError):
    """No active check-in session with the given id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Check-in session {session_id} not found")
        self.session_id = session_id
