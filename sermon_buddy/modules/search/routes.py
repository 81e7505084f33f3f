from fastapi import APIRouter, Depends, Request
from sermon_buddy.config.settings import settings
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_request_context
from sermon_buddy.core.rate_limit import limiter
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.search.schemas import SearchResponse
from sermon_buddy.modules.search.service import SearchService
from supabase import Client

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(supabase: Client = Depends(get_supabase)) -> SearchService:
    return SearchService(supabase)


@router.get("", response_model=SearchResponse)
@limiter.limit(settings.search_rate_limit)
async def search(
    request: Request,
    q: str = "",
    ctx: RequestContext = Depends(get_request_context),
    service: SearchService = Depends(get_search_service)
):
    """Search users, churches and public sermon notes (top few of each)"""
    return await service.search(q, ctx)
