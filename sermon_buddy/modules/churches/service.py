import logging
from datetime import datetime, timedelta, timezone
from supabase import Client
from sermon_buddy.config.settings import settings
from sermon_buddy.core.content import ChurchDetails, church_columns, church_details_from_row
from sermon_buddy.core.exceptions import NotFoundFailure, RemoteFailure
from sermon_buddy.modules.churches.schemas import (
    ChurchCreate, ChurchUpdate, ChurchResponse, ChurchProfileResponse,
    ChurchDashboardResponse, ChurchMemberResponse
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def church_from_row(row: Dict[str, Any]) -> ChurchResponse:
    return ChurchResponse(
        id=row["id"],
        name=row["name"],
        details=church_details_from_row(row),
        image_url=row.get("image_url"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


class ChurchService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def insert_church(self, church_data: ChurchCreate) -> ChurchResponse:
        """Insert a church row without touching membership"""
        try:
            details = ChurchDetails(
                description=church_data.description,
                location=church_data.location
            )
            result = self.supabase.table("churches").insert({
                "name": church_data.name.strip(),
                "image_url": church_data.image_url,
                **church_columns(details)
            }).execute()

            if not result.data:
                raise RemoteFailure("Failed to create church")

            return church_from_row(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating church: {e}")
            raise RemoteFailure(str(e))

    def create_church(self, church_data: ChurchCreate, creator_id: str) -> ChurchResponse:
        """Create a church and make its creator the admin"""
        church = self.insert_church(church_data)
        try:
            self.supabase.table("profiles")\
                .update({"church_id": church.id, "church_role": "admin"})\
                .eq("id", creator_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error assigning admin for church {church.id}: {e}")
            raise RemoteFailure(str(e))
        logger.info(f"Church {church.id} created by {creator_id}")
        return church

    def _get_row(self, church_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("churches")\
                .select("*")\
                .eq("id", church_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching church {church_id}: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Church not found")
        return result.data[0]

    def get_church(self, church_id: str) -> ChurchResponse:
        """Get church by ID with its details parsed"""
        return church_from_row(self._get_row(church_id))

    def update_church(self, church_id: str, church_data: ChurchUpdate) -> ChurchResponse:
        """Update church; description and location are merged into the stored details"""
        row = self._get_row(church_id)
        try:
            update_data: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if church_data.name:
                update_data["name"] = church_data.name.strip()
            if church_data.image_url is not None:
                update_data["image_url"] = church_data.image_url
            if church_data.description is not None or church_data.location is not None:
                details = church_details_from_row(row)
                if church_data.description is not None:
                    details.description = church_data.description
                if church_data.location is not None:
                    details.location = church_data.location
                update_data.update(church_columns(details, row))

            result = self.supabase.table("churches")\
                .update(update_data)\
                .eq("id", church_id)\
                .execute()

            if not result.data:
                raise NotFoundFailure("Church not found")

            return church_from_row(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating church {church_id}: {e}")
            raise RemoteFailure(str(e))

    def list_churches(self, limit: int = 20, offset: int = 0) -> List[ChurchResponse]:
        """List churches alphabetically"""
        try:
            result = self.supabase.table("churches")\
                .select("*")\
                .order("name")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [church_from_row(row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing churches: {e}")
            raise RemoteFailure(str(e))

    def count_members(self, church_id: str) -> int:
        try:
            result = self.supabase.table("profiles")\
                .select("id", count="exact", head=True)\
                .eq("church_id", church_id)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error counting members of church {church_id}: {e}")
            raise RemoteFailure(str(e))

    def count_sermons(self, church_id: str, since: Optional[datetime] = None) -> int:
        try:
            query = self.supabase.table("sermon_notes")\
                .select("id", count="exact", head=True)\
                .eq("church_id", church_id)
            if since is not None:
                query = query.gte("created_at", since.isoformat())
            result = query.execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error counting sermons of church {church_id}: {e}")
            raise RemoteFailure(str(e))

    def get_church_profile(self, church_id: str) -> ChurchProfileResponse:
        """Church details plus member and sermon counts"""
        church = self.get_church(church_id)
        return ChurchProfileResponse(
            **church.model_dump(),
            member_count=self.count_members(church_id),
            sermon_count=self.count_sermons(church_id),
        )

    def get_dashboard(self, church_id: str) -> ChurchDashboardResponse:
        """Admin dashboard: members and notes written in the recent activity window"""
        church = self.get_church(church_id)
        window_days = settings.recent_activity_days
        since = datetime.now(timezone.utc) - timedelta(days=window_days)
        return ChurchDashboardResponse(
            church=church,
            member_count=self.count_members(church_id),
            recent_activity_count=self.count_sermons(church_id, since=since),
            activity_window_days=window_days,
        )

    def list_members(self, church_id: str) -> List[ChurchMemberResponse]:
        """List profiles affiliated with the church"""
        self._get_row(church_id)
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, full_name, avatar_url, church_role")\
                .eq("church_id", church_id)\
                .order("username")\
                .execute()
            return [ChurchMemberResponse(**row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing members of church {church_id}: {e}")
            raise RemoteFailure(str(e))
