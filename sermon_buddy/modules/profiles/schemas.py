from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    church_id: Optional[str] = None
    church_role: Optional[str] = None
    church_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileStats(BaseModel):
    sermon_count: int = 0
    follower_count: int = 0
    following_count: int = 0


class ChurchMembershipRequest(BaseModel):
    church_id: str
