from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from sermon_buddy.core.content import SermonContent
from sermon_buddy.modules.tags.schemas import TagResponse


class NotePrivacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    CHURCH = "church"


class NoteCreate(BaseModel):
    title: str = Field(min_length=1)
    pastor_name: str = ""
    church_name: str = ""
    content: str = ""
    bible_verses: List[str] = Field(default_factory=list)
    privacy: NotePrivacy = NotePrivacy.PUBLIC
    church_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class NoteAuthor(BaseModel):
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class NoteResponse(BaseModel):
    id: str
    user_id: str
    title: str
    privacy: NotePrivacy
    church_id: Optional[str] = None
    content: SermonContent
    author: Optional[NoteAuthor] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NoteDetailResponse(NoteResponse):
    tags: List[TagResponse] = Field(default_factory=list)
    praise_count: int = 0


class FeedPage(BaseModel):
    items: List[NoteResponse]
    next_cursor: Optional[str] = None
