"""
Dashboard and Entry Endpoints

Cached analytics per user, and explicit entry deletion. Deleting an
entry invalidates the user's cached dashboard before returning.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from aura.api.dependencies import AppContainer, get_container
from aura.config.logging_config import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/dashboard/{user_id}",
    summary="Dashboard analytics",
    description="Mood trends, streaks, and recent entries (cached for a few minutes)",
)
async def get_dashboard(
    user_id: UUID,
    container: AppContainer = Depends(get_container),
) -> dict:
    aggregate = await container.analytics.get_dashboard_data(user_id)
    return aggregate.to_dict()


@router.delete(
    "/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an entry",
)
async def delete_entry(
    entry_id: UUID,
    user_id: UUID = Query(..., description="Owner of the entry"),
    container: AppContainer = Depends(get_container),
) -> Response:
    removed = await container.entry_store.delete(entry_id, user_id)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entry {entry_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
