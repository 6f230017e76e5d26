"""
Crisis Resource Endpoints

Resources rendered alongside the safety interstitial, plus the
monitoring flags the crisis gate records. Consumed by the
presentation layer only; generation never reads them.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from aura.api.dependencies import AppContainer, get_container
from aura.services.safety.crisis_resources import CrisisResource, ResourceType

router = APIRouter()


class AddResourceRequest(BaseModel):
    """A user's own crisis contact."""

    name: str = Field(..., min_length=1, max_length=200)
    resource_type: ResourceType = Field(..., description="Kind of resource")
    description: str = Field(default="", max_length=500)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
    availability: str = Field(default="24/7", max_length=100)
    priority: int = Field(default=1, ge=1, le=10)


@router.get(
    "/resources/{user_id}",
    summary="Crisis resources for a user",
)
async def get_resources(
    user_id: UUID,
    limit: Optional[int] = Query(default=None, ge=1, le=20),
    container: AppContainer = Depends(get_container),
) -> dict:
    resources = container.crisis_resources.get(user_id, limit=limit)
    return {
        "user_id": str(user_id),
        "resources": [r.to_dict() for r in resources],
    }


@router.post(
    "/resources/{user_id}",
    status_code=status.HTTP_201_CREATED,
    summary="Register a personal crisis resource",
)
async def add_resource(
    user_id: UUID,
    body: AddResourceRequest,
    container: AppContainer = Depends(get_container),
) -> dict:
    resource = container.crisis_resources.add(
        user_id,
        CrisisResource(
            name=body.name,
            resource_type=body.resource_type,
            description=body.description,
            phone=body.phone,
            website=body.website,
            availability=body.availability,
            priority=body.priority,
        ),
    )
    return resource.to_dict()


@router.get(
    "/flags/{user_id}",
    summary="Recent crisis flags for a user",
)
async def get_flags(
    user_id: UUID,
    limit: int = Query(default=10, ge=1, le=100),
    container: AppContainer = Depends(get_container),
) -> dict:
    flags = await container.crisis_flag_store.list_for_user(user_id, limit=limit)
    return {
        "user_id": str(user_id),
        "flags": [f.to_dict() for f in flags],
    }
