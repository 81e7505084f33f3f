from fastapi import APIRouter, Depends, Query
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_authenticated_context, get_request_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.notes.feed import FeedComposer, FeedScope
from sermon_buddy.modules.notes.schemas import NoteCreate, NoteDetailResponse, FeedPage
from sermon_buddy.modules.notes.service import NoteService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/notes", tags=["notes"])


def get_note_service(supabase: Client = Depends(get_supabase)) -> NoteService:
    return NoteService(supabase)


def get_feed_composer(supabase: Client = Depends(get_supabase)) -> FeedComposer:
    return FeedComposer(supabase)


@router.post("", response_model=NoteDetailResponse, status_code=201)
async def create_note(
    note_data: NoteCreate,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: NoteService = Depends(get_note_service)
):
    """Create a sermon note (with tags) for the caller"""
    return service.create_note(note_data, ctx)


@router.get("/feed", response_model=FeedPage)
async def get_feed(
    author_id: Optional[str] = None,
    church_id: Optional[str] = None,
    cursor: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    ctx: RequestContext = Depends(get_request_context),
    composer: FeedComposer = Depends(get_feed_composer)
):
    """Newest-first notes by one author, by one church, or all public notes"""
    scope = FeedScope.from_params(author_id=author_id, church_id=church_id)
    return composer.compose(scope, ctx, cursor=cursor, limit=limit)


@router.get("/{note_id}", response_model=NoteDetailResponse)
async def get_note(
    note_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: NoteService = Depends(get_note_service)
):
    return service.get_note(note_id, ctx)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: NoteService = Depends(get_note_service)
):
    """Delete one of the caller's own notes"""
    service.delete_note(note_id, ctx)
    return None
