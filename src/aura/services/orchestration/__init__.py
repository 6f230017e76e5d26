"""Check-in orchestration package."""

from aura.services.orchestration.check_in_pipeline import CheckInPipeline
from aura.services.orchestration.response_orchestrator import (
    OrchestratedResponse,
    OrchestratorConfig,
    ResponseHistory,
    ResponseOrchestrator,
    blend_hybrid,
    score_confidence,
)

__all__ = [
    "CheckInPipeline",
    "OrchestratedResponse",
    "OrchestratorConfig",
    "ResponseHistory",
    "ResponseOrchestrator",
    "blend_hybrid",
    "score_confidence",
]
