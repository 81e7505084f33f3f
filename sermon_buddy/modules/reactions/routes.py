from fastapi import APIRouter, Depends
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_authenticated_context, get_request_context
from sermon_buddy.database.supabase_client import get_supabase
from sermon_buddy.modules.reactions.schemas import PraiseState, CommentCreate, CommentResponse
from sermon_buddy.modules.reactions.service import ReactionService
from supabase import Client
from typing import List

router = APIRouter(prefix="/notes", tags=["reactions"])


def get_reaction_service(supabase: Client = Depends(get_supabase)) -> ReactionService:
    return ReactionService(supabase)


@router.get("/{note_id}/praise", response_model=PraiseState)
async def get_praise_state(
    note_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ReactionService = Depends(get_reaction_service)
):
    return service.get_praise_state(note_id, ctx)


@router.post("/{note_id}/praise", response_model=PraiseState)
async def toggle_praise(
    note_id: str,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ReactionService = Depends(get_reaction_service)
):
    """Praise a note, or withdraw an existing praise"""
    return service.toggle_praise(note_id, ctx)


@router.get("/{note_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    note_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ReactionService = Depends(get_reaction_service)
):
    return service.list_comments(note_id, ctx)


@router.post("/{note_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    note_id: str,
    comment: CommentCreate,
    ctx: RequestContext = Depends(get_authenticated_context),
    service: ReactionService = Depends(get_reaction_service)
):
    return service.add_comment(note_id, comment.content, ctx)
