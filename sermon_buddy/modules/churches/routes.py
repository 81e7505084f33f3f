from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import check_church_admin, get_authenticated_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.churches.schemas import (
    ChurchCreate, ChurchUpdate, ChurchResponse, ChurchProfileResponse,
    ChurchDashboardResponse, ChurchMemberResponse
)
from sermon_buddy.modules.churches.service import ChurchService
from sermon_buddy.modules.notes.service import NoteService
from supabase import Client
from typing import List

router = APIRouter(prefix="/churches", tags=["churches"])


def get_church_service(supabase: Client = Depends(get_supabase)) -> ChurchService:
    return ChurchService(supabase)


@router.post("", response_model=ChurchResponse, status_code=201)
async def create_church(
    church_data: ChurchCreate,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ChurchService = Depends(get_church_service)
):
    """Create a church; the caller becomes its admin"""
    return service.create_church(church_data, ctx.viewer_id)


@router.get("", response_model=List[ChurchResponse])
async def list_churches(
    limit: int = 20,
    offset: int = 0,
    service: ChurchService = Depends(get_church_service)
):
    return service.list_churches(limit=limit, offset=offset)


@router.get("/{church_id}", response_model=ChurchProfileResponse)
async def get_church(
    church_id: str,
    service: ChurchService = Depends(get_church_service)
):
    """Church profile with parsed details, member count and sermon count"""
    return service.get_church_profile(church_id)


@router.put("/{church_id}", response_model=ChurchResponse)
async def update_church(
    church_id: str,
    church_data: ChurchUpdate,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ChurchService = Depends(get_church_service),
    supabase: Client = Depends(get_supabase)
):
    """Update church (church admin only)"""
    check_church_admin(church_id, ctx, supabase)
    return service.update_church(church_id, church_data)


@router.get("/{church_id}/members", response_model=List[ChurchMemberResponse])
async def list_members(
    church_id: str,
    service: ChurchService = Depends(get_church_service)
):
    return service.list_members(church_id)


@router.get("/{church_id}/dashboard", response_model=ChurchDashboardResponse)
async def get_dashboard(
    church_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ChurchService = Depends(get_church_service),
    supabase: Client = Depends(get_supabase)
):
    """Member count and recent note activity (church admin only)"""
    check_church_admin(church_id, ctx, supabase)
    return service.get_dashboard(church_id)


@router.delete("/{church_id}/notes/{note_id}", status_code=204)
async def remove_church_note(
    church_id: str,
    note_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    supabase: Client = Depends(get_supabase)
):
    """Moderation: remove a note posted to this church (church admin only)"""
    check_church_admin(church_id, ctx, supabase)
    NoteService(supabase).remove_from_church(note_id, church_id)
    return None
