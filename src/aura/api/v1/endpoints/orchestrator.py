"""
Orchestrator Policy Endpoints

Read and adjust how often AI generation is attempted and how
confident it must be before its text is used unblended. Changes
apply to check-ins generated afterwards.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from aura.api.dependencies import AppContainer, get_container
from aura.services.orchestration.response_orchestrator import OrchestratorConfig

router = APIRouter()


class OrchestratorConfigResponse(BaseModel):
    ai_attempt_percentage: int
    confidence_threshold: float

    @classmethod
    def from_config(cls, config: OrchestratorConfig) -> "OrchestratorConfigResponse":
        return cls(
            ai_attempt_percentage=config.ai_attempt_percentage,
            confidence_threshold=config.confidence_threshold,
        )


class UpdateOrchestratorConfigRequest(BaseModel):
    """Fields left unset keep their current value."""

    ai_attempt_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    confidence_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)


@router.get(
    "/config",
    response_model=OrchestratorConfigResponse,
    summary="Current orchestrator policy",
)
async def get_config(
    container: AppContainer = Depends(get_container),
) -> OrchestratorConfigResponse:
    return OrchestratorConfigResponse.from_config(container.pipeline.orchestrator.config)


@router.put(
    "/config",
    response_model=OrchestratorConfigResponse,
    summary="Update orchestrator policy",
)
async def update_config(
    request: UpdateOrchestratorConfigRequest,
    container: AppContainer = Depends(get_container),
) -> OrchestratorConfigResponse:
    changes = request.model_dump(exclude_none=True)
    config = container.reconfigure_orchestrator(**changes)
    return OrchestratorConfigResponse.from_config(config)
