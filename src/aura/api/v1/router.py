"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from aura.api.v1.endpoints.check_in import router as check_in_router
from aura.api.v1.endpoints.crisis import router as crisis_router
from aura.api.v1.endpoints.dashboard import router as dashboard_router
from aura.api.v1.endpoints.health import router as health_router
from aura.api.v1.endpoints.orchestrator import router as orchestrator_router

api_router = APIRouter()

api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    check_in_router,
    prefix="/check-in",
    tags=["Check-in"],
)

api_router.include_router(
    dashboard_router,
    tags=["Dashboard"],
)

api_router.include_router(
    crisis_router,
    prefix="/crisis",
    tags=["Crisis"],
)

api_router.include_router(
    orchestrator_router,
    prefix="/orchestrator",
    tags=["Orchestrator"],
)
