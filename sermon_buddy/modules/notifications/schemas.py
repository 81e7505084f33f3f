from enum import Enum
from pydantic import BaseModel
from datetime import datetime


class NotificationType(str, Enum):
    FOLLOW = "follow"
    PRAISE = "praise"
    COMMENT = "comment"


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    content: str
    read: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAllReadResponse(BaseModel):
    updated: int
