"""
Admin Routes

GET /admin/activity - Recent platform activity (newest first, max 50)
GET /admin/stats - Current live stats
POST /admin/stats - Merge a partial stats update and push it to admin sockets
POST /admin/announcements - Push an announcement to admin sockets
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from careerhub.core.auth import get_current_admin
from careerhub.services.activity_hub import ActivityHub, get_activity_hub
from careerhub.schemas.schemas import (
    ActivityEvent, AnnouncementRequest, DeliveryResponse, LiveStats, LiveStatsUpdate
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/activity", response_model=List[ActivityEvent])
async def recent_activity(
    limit: int = Query(50, ge=1, le=50),
    admin: dict = Depends(get_current_admin),
    hub: ActivityHub = Depends(get_activity_hub)
):
    return hub.history.recent(limit)


@router.get("/stats", response_model=LiveStats)
async def live_stats(
    admin: dict = Depends(get_current_admin),
    hub: ActivityHub = Depends(get_activity_hub)
):
    return hub.stats


@router.post("/stats", response_model=LiveStats)
async def update_stats(
    update: LiveStatsUpdate,
    admin: dict = Depends(get_current_admin),
    hub: ActivityHub = Depends(get_activity_hub)
):
    """Only the fields present in the body are changed."""
    return await hub.publish_stats(update)


@router.post("/announcements", response_model=DeliveryResponse)
async def publish_announcement(
    data: AnnouncementRequest,
    admin: dict = Depends(get_current_admin),
    hub: ActivityHub = Depends(get_activity_hub)
):
    """
    Push an announcement to connected admins.
    Fire-and-forget: `delivered` counts sockets written to, nothing is retried.
    """
    delivered = await hub.publish_announcement(
        data.title, data.message, data.priority, actor=admin.get("full_name") or admin["email"]
    )
    return DeliveryResponse(delivered=delivered)
