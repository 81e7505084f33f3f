from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_authenticated_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.follows.schemas import FollowState
from sermon_buddy.modules.follows.service import FollowService
from supabase import Client

router = APIRouter(prefix="/profiles", tags=["follows"])


def get_follow_service(supabase: Client = Depends(get_supabase)) -> FollowService:
    return FollowService(supabase)


@router.get("/{user_id}/follow", response_model=FollowState)
async def get_follow_state(
    user_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: FollowService = Depends(get_follow_service)
):
    """Whether the caller follows user_id"""
    return service.get_state(ctx.viewer_id, user_id)


@router.post("/{user_id}/follow", response_model=FollowState)
async def follow(
    user_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: FollowService = Depends(get_follow_service)
):
    return service.follow(ctx.viewer_id, user_id)


@router.delete("/{user_id}/follow", response_model=FollowState)
async def unfollow(
    user_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: FollowService = Depends(get_follow_service)
):
    return service.unfollow(ctx.viewer_id, user_id)
