import logging
from datetime import datetime, timezone
from supabase import Client
from sermon_buddy.core.exceptions import NotFoundFailure, RemoteFailure, ValidationFailure
from sermon_buddy.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileStats
from typing import Any, Dict
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def profile_from_row(row: Dict[str, Any]) -> ProfileResponse:
    data = dict(row)
    church = data.pop("churches", None)
    data["church_name"] = church.get("name") if church else None
    return ProfileResponse(**data)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch_one(self, column: str, value: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .select("*, churches(name)")\
                .eq(column, value)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profile by {column}: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Profile not found")
        return profile_from_row(result.data[0])

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by ID, with the affiliated church's name"""
        return self._fetch_one("id", user_id)

    def get_profile_by_username(self, username: str) -> ProfileResponse:
        """Get profile by its unique handle"""
        return self._fetch_one("username", username)

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile"""
        try:
            update_data: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if profile_data.username is not None:
                username = profile_data.username.strip()
                if not username:
                    raise ValidationFailure("Username cannot be blank")
                taken = self.supabase.table("profiles")\
                    .select("id")\
                    .eq("username", username)\
                    .neq("id", user_id)\
                    .limit(1)\
                    .execute()
                if taken.data:
                    raise ValidationFailure("Username already taken")
                update_data["username"] = username
            if profile_data.full_name is not None:
                update_data["full_name"] = profile_data.full_name
            if profile_data.bio is not None:
                update_data["bio"] = profile_data.bio
            if profile_data.avatar_url is not None:
                update_data["avatar_url"] = profile_data.avatar_url

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise NotFoundFailure("Profile not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile {user_id}: {e}")
            raise RemoteFailure(str(e))
        return self.get_profile(user_id)

    def _count(self, table: str, **filters: str) -> int:
        query = self.supabase.table(table).select("*", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def get_stats(self, user_id: str) -> ProfileStats:
        """Public sermon count plus follower/following counts"""
        try:
            return ProfileStats(
                sermon_count=self._count("sermon_notes", user_id=user_id, privacy="public"),
                follower_count=self._count("follows", following_id=user_id),
                following_count=self._count("follows", follower_id=user_id),
            )
        except Exception as e:
            logger.error(f"Error computing stats for {user_id}: {e}")
            raise RemoteFailure(str(e))

    def join_church(self, user_id: str, church_id: str) -> ProfileResponse:
        """Affiliate the user with a church as a member (replaces any previous affiliation)"""
        try:
            church = self.supabase.table("churches")\
                .select("id")\
                .eq("id", church_id)\
                .limit(1)\
                .execute()
            if not church.data:
                raise NotFoundFailure("Church not found")

            current = self.get_profile(user_id)
            if current.church_id == church_id:
                return current

            self.supabase.table("profiles")\
                .update({"church_id": church_id, "church_role": "member"})\
                .eq("id", user_id)\
                .execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error joining church {church_id} for {user_id}: {e}")
            raise RemoteFailure(str(e))
        logger.info(f"User {user_id} joined church {church_id}")
        return self.get_profile(user_id)

    def leave_church(self, user_id: str) -> ProfileResponse:
        """Clear the user's church affiliation and role"""
        try:
            self.supabase.table("profiles")\
                .update({"church_id": None, "church_role": None})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error leaving church for {user_id}: {e}")
            raise RemoteFailure(str(e))
        return self.get_profile(user_id)
