from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class TagResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class TrendingTagResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    created_at: Optional[datetime] = None
    count: int = Field(default=0, alias="_count")
