import logging
from supabase import Client
from sermon_buddy.core.content import SermonContent, sermon_columns
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_viewer_profile
from sermon_buddy.core.exceptions import NotFoundFailure, PermissionFailure, RemoteFailure, ValidationFailure
from sermon_buddy.modules.notes.feed import NOTE_WITH_AUTHOR, note_from_row
from sermon_buddy.modules.notes.schemas import NoteCreate, NoteDetailResponse, NotePrivacy
from sermon_buddy.modules.tags.service import TagService
from fastapi import HTTPException
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class NoteService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tags = TagService(supabase)

    def create_note(self, note_data: NoteCreate, ctx: RequestContext) -> NoteDetailResponse:
        """Create a sermon note for the viewer and link its tags"""
        if not note_data.title.strip():
            raise ValidationFailure("Title is required")
        church_id = self._author_church_id(note_data, ctx)
        if note_data.privacy == NotePrivacy.CHURCH and not church_id:
            raise ValidationFailure("Church-only notes must name a church")
        content = SermonContent(
            pastor_name=note_data.pastor_name,
            church_name=note_data.church_name,
            content=note_data.content,
            bible_verses=[v.strip() for v in note_data.bible_verses if v.strip()],
        )
        try:
            result = self.supabase.table("sermon_notes").insert({
                "user_id": ctx.viewer_id,
                "title": note_data.title.strip(),
                "privacy": note_data.privacy.value,
                "church_id": church_id,
                **sermon_columns(content)
            }).execute()

            if not result.data:
                raise RemoteFailure("Failed to create sermon note")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating sermon note: {e}")
            raise RemoteFailure(str(e))

        note_id = result.data[0]["id"]
        self.tags.attach_tags(note_id, note_data.tags)
        logger.info(f"Sermon note {note_id} created by {ctx.viewer_id}")
        return self.get_note(note_id, ctx)

    def _author_church_id(self, note_data: NoteCreate, ctx: RequestContext) -> Optional[str]:
        """Notes belong to the author's own church; naming any other church is refused"""
        profile = get_viewer_profile(ctx, self.supabase) or {}
        own_church = profile.get("church_id")
        if note_data.church_id and note_data.church_id != own_church:
            raise PermissionFailure("You can only post notes to your own church")
        return own_church

    def _get_row(self, note_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("sermon_notes")\
                .select(NOTE_WITH_AUTHOR)\
                .eq("id", note_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching sermon note {note_id}: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Sermon note not found")
        return result.data[0]

    def can_view(self, row: Dict[str, Any], ctx: RequestContext) -> bool:
        if row["privacy"] == NotePrivacy.PUBLIC.value or row["user_id"] == ctx.viewer_id:
            return True
        if row["privacy"] == NotePrivacy.CHURCH.value and row.get("church_id"):
            profile = get_viewer_profile(ctx, self.supabase)
            return bool(profile) and profile.get("church_id") == row["church_id"]
        return False

    def get_visible_row(self, note_id: str, ctx: RequestContext) -> Dict[str, Any]:
        """Fetch a note row, hiding it (404) from viewers who may not see it"""
        row = self._get_row(note_id)
        if not self.can_view(row, ctx):
            raise NotFoundFailure("Sermon note not found")
        return row

    def count_praises(self, note_id: str) -> int:
        try:
            result = self.supabase.table("sermon_praises")\
                .select("*", count="exact", head=True)\
                .eq("sermon_id", note_id)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error counting praises of {note_id}: {e}")
            raise RemoteFailure(str(e))

    def get_note(self, note_id: str, ctx: RequestContext) -> NoteDetailResponse:
        """Single note with author, tags and praise count"""
        row = self.get_visible_row(note_id, ctx)
        note = note_from_row(row)
        return NoteDetailResponse(
            **note.model_dump(),
            tags=self.tags.get_sermon_tags(note_id),
            praise_count=self.count_praises(note_id),
        )

    def delete_note(self, note_id: str, ctx: RequestContext) -> bool:
        """Delete one of the viewer's own notes"""
        try:
            result = self.supabase.table("sermon_notes")\
                .delete()\
                .eq("id", note_id)\
                .eq("user_id", ctx.viewer_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting sermon note {note_id}: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Sermon note not found")
        logger.info(f"Sermon note {note_id} deleted by its author")
        return True

    def remove_from_church(self, note_id: str, church_id: str) -> bool:
        """Moderation: remove a note scoped to the given church. Caller checks admin rights."""
        try:
            result = self.supabase.table("sermon_notes")\
                .delete()\
                .eq("id", note_id)\
                .eq("church_id", church_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error removing sermon note {note_id} from church {church_id}: {e}")
            raise RemoteFailure(str(e))
        if not result.data:
            raise NotFoundFailure("Sermon note not found in this church")
        logger.info(f"Sermon note {note_id} removed by church {church_id} moderation")
        return True
