from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_authenticated_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, ProfileStats, ChurchMembershipRequest
)
from sermon_buddy.modules.profiles.service import ProfileService
from supabase import Client

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's own profile"""
    return service.get_profile(ctx.viewer_id)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the caller's own profile"""
    return service.update_profile(ctx.viewer_id, profile_data)


@router.put("/me/church", response_model=ProfileResponse)
async def join_church(
    membership: ChurchMembershipRequest,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Join a church as a member"""
    return service.join_church(ctx.viewer_id, membership.church_id)


@router.delete("/me/church", response_model=ProfileResponse)
async def leave_church(
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Leave the current church"""
    return service.leave_church(ctx.viewer_id)


@router.get("/by-username/{username}", response_model=ProfileResponse)
async def get_profile_by_username(
    username: str,
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile_by_username(username)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(user_id)


@router.get("/{user_id}/stats", response_model=ProfileStats)
async def get_profile_stats(
    user_id: str,
    service: ProfileService = Depends(get_profile_service)
):
    """Public sermon count plus follower and following counts"""
    return service.get_stats(user_id)
