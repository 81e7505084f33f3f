from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from sermon_buddy.modules.notes.schemas import NoteAuthor


class PraiseState(BaseModel):
    sermon_id: str
    praised: bool
    praise_count: int


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: str
    content: str
    created_at: datetime
    author: Optional[NoteAuthor] = None
