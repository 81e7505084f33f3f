from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List

from sermon_buddy.core.content import ChurchDetails


class SearchResultKind(str, Enum):
    USER = "user"
    CHURCH = "church"
    SERMON = "sermon"


class SearchResult(BaseModel):
    kind: SearchResultKind
    id: str
    title: str
    subtitle: Optional[str] = None
    avatar_url: Optional[str] = None
    details: Optional[ChurchDetails] = None


class SearchResponse(BaseModel):
    query: str
    token: int
    results: List[SearchResult] = Field(default_factory=list)
    failed_categories: List[SearchResultKind] = Field(default_factory=list)
    stale: bool = False
