from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_authenticated_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.notifications.schemas import NotificationResponse, MarkAllReadResponse
from sermon_buddy.modules.notifications.service import NotificationService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_unread_notifications(
    limit: Optional[int] = None,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: NotificationService = Depends(get_notification_service)
):
    """Newest unread notifications for the caller"""
    return service.list_unread(ctx.viewer_id, limit=limit)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    ctx: RequestContext = Depends(get_authenticated_context),
    service: NotificationService = Depends(get_notification_service)
):
    return MarkAllReadResponse(updated=service.mark_all_read(ctx.viewer_id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_read(ctx.viewer_id, notification_id)
