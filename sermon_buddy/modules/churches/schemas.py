from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from sermon_buddy.core.content import ChurchDetails, Location


class ChurchCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    location: Location = Field(default_factory=Location)
    image_url: Optional[str] = None


class ChurchUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[Location] = None
    image_url: Optional[str] = None


class ChurchResponse(BaseModel):
    id: str
    name: str
    details: ChurchDetails
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChurchProfileResponse(ChurchResponse):
    member_count: int = 0
    sermon_count: int = 0


class ChurchDashboardResponse(BaseModel):
    church: ChurchResponse
    member_count: int
    recent_activity_count: int
    activity_window_days: int


class ChurchMemberResponse(BaseModel):
    id: str
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    church_role: Optional[str] = None

    class Config:
        from_attributes = True
