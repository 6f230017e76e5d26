"""
Check-in Endpoints

Drives the voice check-in session lifecycle:
create -> toggle (start) -> audio chunks -> toggle (stop) -> review
-> generate. Errors are mapped to HTTP by the exception handlers.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from aura.api.dependencies import get_pipeline
from aura.config.logging_config import get_logger
from aura.domain.enums.check_in import MoodTag, Tone
from aura.domain.models.check_in_session import CheckInSession
from aura.services.orchestration.check_in_pipeline import CheckInPipeline

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class CreateSessionRequest(BaseModel):
    """Request to start a new check-in."""

    user_id: UUID = Field(..., description="User ID to create the session for")
    tone: Tone = Field(default=Tone.CALM, description="Preferred response tone")


class ToggleRecordingRequest(BaseModel):
    """Optional recording parameters when starting."""

    mime_type: Optional[str] = Field(default=None, max_length=100, description="Audio MIME type")


class ReviewRequest(BaseModel):
    """Mood selection and transcript edits."""

    mood_tag: Optional[MoodTag] = None
    transcript: Optional[str] = Field(default=None, max_length=10000)


class AudioChunkResponse(BaseModel):
    session_id: UUID
    bytes_captured: int


class SessionStatusResponse(BaseModel):
    """Check-in session status."""

    id: UUID
    user_id: UUID
    state: str
    tone: str
    has_audio: bool
    transcript: Optional[str] = None
    mood_tag: Optional[str] = None
    response_text: Optional[str] = None
    confidence: Optional[float] = None
    ai_confidence: Optional[float] = None
    source: Optional[str] = None
    suggestions: list[str] = Field(default_factory=list)
    video_status: Optional[str] = None
    entry_id: Optional[UUID] = None
    crisis: Optional[dict] = None
    error_message: Optional[str] = None
    state_history: list[str] = Field(default_factory=list)
    created_at: str
    updated_at: str

    @classmethod
    def from_session(cls, session: CheckInSession) -> "SessionStatusResponse":
        return cls.model_validate(session.to_dict())


@router.post(
    "/sessions",
    response_model=SessionStatusResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a check-in session",
)
async def create_session(
    request: CreateSessionRequest,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    session = pipeline.create_session(request.user_id, request.tone)
    return SessionStatusResponse.from_session(session)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionStatusResponse,
    summary="Get check-in session status",
)
async def get_session(
    session_id: UUID,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    return SessionStatusResponse.from_session(pipeline.get_session(session_id))


@router.post(
    "/sessions/{session_id}/recording/toggle",
    response_model=SessionStatusResponse,
    summary="Start or stop recording",
)
async def toggle_recording(
    session_id: UUID,
    request: Optional[ToggleRecordingRequest] = None,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    """
    Start recording from idle, or stop and transcribe.

    A transcription failure returns the session in idle with an
    error message rather than an error status.
    """
    mime_type = request.mime_type if request else None
    session = await pipeline.toggle_recording(session_id, mime_type)
    return SessionStatusResponse.from_session(session)


@router.post(
    "/sessions/{session_id}/recording/audio",
    response_model=AudioChunkResponse,
    summary="Append a chunk of recorded audio",
)
async def append_audio(
    session_id: UUID,
    request: Request,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> AudioChunkResponse:
    chunk = await request.body()
    total = pipeline.append_audio(session_id, chunk)
    return AudioChunkResponse(session_id=session_id, bytes_captured=total)


@router.post(
    "/sessions/{session_id}/recording/abort",
    response_model=SessionStatusResponse,
    summary="Discard the in-progress recording",
)
async def abort_recording(
    session_id: UUID,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    return SessionStatusResponse.from_session(pipeline.abort_recording(session_id))


@router.put(
    "/sessions/{session_id}/review",
    response_model=SessionStatusResponse,
    summary="Select mood and edit transcript",
)
async def review(
    session_id: UUID,
    request: ReviewRequest,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    session = pipeline.review(session_id, mood=request.mood_tag, transcript=request.transcript)
    return SessionStatusResponse.from_session(session)


@router.post(
    "/sessions/{session_id}/crisis-consent",
    response_model=SessionStatusResponse,
    summary="Explicitly continue after a safety halt",
)
async def crisis_consent(
    session_id: UUID,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    """
    SAFETY-CRITICAL: Consent applies only to the current transcript.
    """
    return SessionStatusResponse.from_session(pipeline.acknowledge_crisis(session_id))


@router.post(
    "/sessions/{session_id}/generate",
    response_model=SessionStatusResponse,
    summary="Generate and save the check-in response",
)
async def generate(
    session_id: UUID,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    session = await pipeline.generate(session_id)
    return SessionStatusResponse.from_session(session)


@router.post(
    "/sessions/{session_id}/reset",
    response_model=SessionStatusResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Discard the session and start a new one",
)
async def reset(
    session_id: UUID,
    pipeline: CheckInPipeline = Depends(get_pipeline),
) -> SessionStatusResponse:
    return SessionStatusResponse.from_session(pipeline.reset(session_id))
