"""
Health Check Endpoints

Provides system health and readiness endpoints for:
- Load balancer health checks
- Kubernetes probes
- Monitoring systems
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from aura import __version__
from aura.api.dependencies import AppContainer, get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check(container: AppContainer = Depends(get_container)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=container.settings.env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Detailed readiness check including all components",
)
async def readiness_check(container: AppContainer = Depends(get_container)) -> ReadinessResponse:
    """
    Ready when the entry store is reachable.

    Missing provider keys are reported but do not block readiness;
    every provider has a degraded path.
    """
    components: dict = {}

    if container.db is not None:
        components["database"] = await container.db.health_check()
    else:
        components["database"] = "in-memory"

    components["video"] = container.video.is_enabled
    components["background_tasks"] = container.registry.active_count
    components["active_sessions"] = container.pipeline.active_sessions

    ready = components["database"] is not False
    return ReadinessResponse(ready=ready, components=components)


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe endpoint",
)
async def liveness_check(container: AppContainer = Depends(get_container)) -> HealthResponse:
    return HealthResponse(
        status="alive",
        version=__version__,
        environment=container.settings.env,
    )
