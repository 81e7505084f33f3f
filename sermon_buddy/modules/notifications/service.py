import logging
from supabase import Client
from sermon_buddy.config.settings import settings
from sermon_buddy.core.exceptions import NotFoundFailure, RemoteFailure
from sermon_buddy.modules.notifications.schemas import NotificationResponse, NotificationType
from typing import List, Optional

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_unread(self, user_id: str, limit: Optional[int] = None) -> List[NotificationResponse]:
        """Newest unread notifications for the user"""
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .order("created_at", desc=True)\
                .limit(limit or settings.notifications_preview_limit)\
                .execute()
            return [NotificationResponse(**row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing notifications for {user_id}: {e}")
            raise RemoteFailure(str(e))

    def mark_read(self, user_id: str, notification_id: str) -> NotificationResponse:
        """Mark one of the user's notifications as read"""
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} read: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Notification not found")
        return NotificationResponse(**result.data[0])

    def mark_all_read(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return len(result.data)
        except Exception as e:
            logger.error(f"Error marking notifications read for {user_id}: {e}")
            raise RemoteFailure(str(e))

    def notify(self, recipient_id: str, actor_id: str, kind: NotificationType, content: str) -> bool:
        """
        Record a notification for recipient_id about something actor_id did.
        Self-actions are skipped. A failed insert is logged and reported as False;
        the action that triggered it has already succeeded.
        """
        if recipient_id == actor_id:
            return False
        try:
            self.supabase.table("notifications").insert({
                "user_id": recipient_id,
                "type": kind.value,
                "content": content,
                "read": False
            }).execute()
            return True
        except Exception as e:
            logger.warning(f"Could not record {kind.value} notification for {recipient_id}: {e}")
            return False
