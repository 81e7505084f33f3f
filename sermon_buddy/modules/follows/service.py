import logging
from supabase import Client
from sermon_buddy.core.exceptions import NotFoundFailure, RemoteFailure, ValidationFailure
from sermon_buddy.modules.follows.schemas import FollowState
from sermon_buddy.modules.notifications.schemas import NotificationType
from sermon_buddy.modules.notifications.service import NotificationService
from fastapi import HTTPException
from typing import Any, Dict

logger = logging.getLogger(__name__)


class FollowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notifications = NotificationService(supabase)

    def _get_username(self, user_id: str) -> str:
        result = self.supabase.table("profiles")\
            .select("username")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFoundFailure("Profile not found")
        return result.data[0]["username"]

    def _edge(self, follower_id: str, following_id: str) -> Dict[str, Any]:
        return {"follower_id": follower_id, "following_id": following_id}

    def is_following(self, follower_id: str, following_id: str) -> bool:
        try:
            result = self.supabase.table("follows")\
                .select("follower_id")\
                .eq("follower_id", follower_id)\
                .eq("following_id", following_id)\
                .limit(1)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error reading follow edge {follower_id}->{following_id}: {e}")
            raise RemoteFailure(str(e))

    def follow(self, follower_id: str, following_id: str) -> FollowState:
        """Follow a profile. Following twice is a no-op."""
        if follower_id == following_id:
            raise ValidationFailure("You cannot follow yourself")
        try:
            self._get_username(following_id)
            if self.is_following(follower_id, following_id):
                return FollowState(**self._edge(follower_id, following_id), following=True)

            self.supabase.table("follows")\
                .insert(self._edge(follower_id, following_id))\
                .execute()
            follower_username = self._get_username(follower_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error following {following_id} as {follower_id}: {e}")
            raise RemoteFailure(str(e))

        self.notifications.notify(
            following_id, follower_id, NotificationType.FOLLOW,
            f"@{follower_username} started following you"
        )
        return FollowState(**self._edge(follower_id, following_id), following=True)

    def unfollow(self, follower_id: str, following_id: str) -> FollowState:
        try:
            self.supabase.table("follows")\
                .delete()\
                .eq("follower_id", follower_id)\
                .eq("following_id", following_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error unfollowing {following_id} as {follower_id}: {e}")
            raise RemoteFailure(str(e))
        return FollowState(**self._edge(follower_id, following_id), following=False)

    def get_state(self, follower_id: str, following_id: str) -> FollowState:
        return FollowState(
            **self._edge(follower_id, following_id),
            following=self.is_following(follower_id, following_id)
        )
