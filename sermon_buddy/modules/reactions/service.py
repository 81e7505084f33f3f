import logging
from supabase import Client
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.dependencies import get_viewer_profile
from sermon_buddy.core.exceptions import RemoteFailure, ValidationFailure
from sermon_buddy.modules.notes.schemas import NoteAuthor
from sermon_buddy.modules.notes.service import NoteService
from sermon_buddy.modules.notifications.schemas import NotificationType
from sermon_buddy.modules.notifications.service import NotificationService
from sermon_buddy.modules.reactions.schemas import PraiseState, CommentResponse
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def comment_from_row(row: Dict[str, Any]) -> CommentResponse:
    author = row.get("profiles")
    return CommentResponse(
        id=row["id"],
        content=row["content"],
        created_at=row["created_at"],
        author=NoteAuthor(**author) if author else None,
    )


class ReactionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notes = NoteService(supabase)
        self.notifications = NotificationService(supabase)

    def _actor_handle(self, ctx: RequestContext) -> str:
        profile = get_viewer_profile(ctx, self.supabase) or {}
        return f"@{profile.get('username', 'someone')}"

    def has_praised(self, note_id: str, user_id: str) -> bool:
        result = self.supabase.table("sermon_praises")\
            .select("id")\
            .eq("sermon_id", note_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def get_praise_state(self, note_id: str, ctx: RequestContext) -> PraiseState:
        self.notes.get_visible_row(note_id, ctx)
        try:
            praised = ctx.is_authenticated and self.has_praised(note_id, ctx.viewer_id)
        except Exception as e:
            logger.error(f"Error reading praise state of {note_id}: {e}")
            raise RemoteFailure(str(e))
        return PraiseState(
            sermon_id=note_id,
            praised=praised,
            praise_count=self.notes.count_praises(note_id)
        )

    def toggle_praise(self, note_id: str, ctx: RequestContext) -> PraiseState:
        """Praise the note, or withdraw the viewer's praise if already given"""
        note = self.notes.get_visible_row(note_id, ctx)
        try:
            if self.has_praised(note_id, ctx.viewer_id):
                self.supabase.table("sermon_praises")\
                    .delete()\
                    .eq("sermon_id", note_id)\
                    .eq("user_id", ctx.viewer_id)\
                    .execute()
                praised = False
            else:
                self.supabase.table("sermon_praises").insert({
                    "sermon_id": note_id,
                    "user_id": ctx.viewer_id
                }).execute()
                praised = True
        except Exception as e:
            logger.error(f"Error toggling praise on {note_id}: {e}")
            raise RemoteFailure(str(e))

        if praised:
            self.notifications.notify(
                note["user_id"], ctx.viewer_id, NotificationType.PRAISE,
                f"{self._actor_handle(ctx)} praised your sermon note \"{note['title']}\""
            )
        return PraiseState(
            sermon_id=note_id,
            praised=praised,
            praise_count=self.notes.count_praises(note_id)
        )

    def list_comments(self, note_id: str, ctx: RequestContext) -> List[CommentResponse]:
        """Comments on a note, newest first"""
        self.notes.get_visible_row(note_id, ctx)
        try:
            result = self.supabase.table("sermon_comments")\
                .select("id, content, created_at, profiles(username, full_name, avatar_url)")\
                .eq("sermon_id", note_id)\
                .order("created_at", desc=True)\
                .execute()
            return [comment_from_row(row) for row in result.data]
        except Exception as e:
            logger.error(f"Error listing comments of {note_id}: {e}")
            raise RemoteFailure(str(e))

    def add_comment(self, note_id: str, content: str, ctx: RequestContext) -> CommentResponse:
        text = content.strip()
        if not text:
            raise ValidationFailure("Comment cannot be empty")
        note = self.notes.get_visible_row(note_id, ctx)
        try:
            result = self.supabase.table("sermon_comments").insert({
                "sermon_id": note_id,
                "user_id": ctx.viewer_id,
                "content": text
            }).execute()
            if not result.data:
                raise RemoteFailure("Failed to add comment")
            created = self.supabase.table("sermon_comments")\
                .select("id, content, created_at, profiles(username, full_name, avatar_url)")\
                .eq("id", result.data[0]["id"])\
                .limit(1)\
                .execute()
        except RemoteFailure:
            raise
        except Exception as e:
            logger.error(f"Error commenting on {note_id}: {e}")
            raise RemoteFailure(str(e))

        self.notifications.notify(
            note["user_id"], ctx.viewer_id, NotificationType.COMMENT,
            f"{self._actor_handle(ctx)} commented on your sermon note \"{note['title']}\""
        )
        return comment_from_row(created.data[0] if created.data else result.data[0])
