from fastapi import APIRouter, Depends
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.tags.schemas import TrendingTagResponse
from sermon_buddy.modules.tags.service import TagService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/tags", tags=["tags"])


def get_tag_service(supabase: Client = Depends(get_supabase)) -> TagService:
    return TagService(supabase)


@router.get("/trending", response_model=List[TrendingTagResponse])
async def trending_tags(
    limit: Optional[int] = None,
    service: TagService = Depends(get_tag_service)
):
    """Trending topics"""
    return service.get_trending(limit=limit)
