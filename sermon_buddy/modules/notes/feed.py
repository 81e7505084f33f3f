"""
Sermon note feeds.

A feed is one of three mutually exclusive scopes (by author, by church, all
public) ordered newest first. Pages are keyed on (created_at, id) so that rows
inserted while a client is paging never shift later pages.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from supabase import Client

from sermon_buddy.config.settings import settings
from sermon_buddy.core.content import sermon_content_from_row
from sermon_buddy.core.context import RequestContext
from sermon_buddy.core.exceptions import RemoteFailure, ValidationFailure
from sermon_buddy.modules.notes.schemas import FeedPage, NoteAuthor, NotePrivacy, NoteResponse

logger = logging.getLogger(__name__)

NOTE_WITH_AUTHOR = "*, profiles(username, full_name, avatar_url)"


class FeedMode(str, Enum):
    BY_AUTHOR = "by_author"
    BY_GROUP = "by_group"
    PUBLIC_ALL = "public_all"


@dataclass(frozen=True)
class FeedScope:
    mode: FeedMode
    target_id: Optional[str] = None

    @classmethod
    def by_author(cls, user_id: str) -> "FeedScope":
        return cls(FeedMode.BY_AUTHOR, user_id)

    @classmethod
    def by_group(cls, church_id: str) -> "FeedScope":
        return cls(FeedMode.BY_GROUP, church_id)

    @classmethod
    def public_all(cls) -> "FeedScope":
        return cls(FeedMode.PUBLIC_ALL)

    @classmethod
    def from_params(cls, author_id: Optional[str] = None, church_id: Optional[str] = None) -> "FeedScope":
        """Pick the scope from request parameters; at most one may be given."""
        if author_id and church_id:
            raise ValidationFailure("Pass either author_id or church_id, not both")
        if author_id:
            return cls.by_author(author_id)
        if church_id:
            return cls.by_group(church_id)
        return cls.public_all()


def encode_cursor(created_at: str, note_id: str) -> str:
    raw = json.dumps([created_at, note_id]).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(cursor: str) -> Tuple[str, str]:
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        created_at, note_id = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (binascii.Error, ValueError, TypeError, UnicodeDecodeError):
        raise ValidationFailure("Malformed feed cursor")
    if not isinstance(created_at, str) or not isinstance(note_id, str):
        raise ValidationFailure("Malformed feed cursor")
    return created_at, note_id


def _quote(value: str) -> str:
    # PostgREST logic-tree value quoting
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def note_from_row(row: Dict[str, Any]) -> NoteResponse:
    """Map a sermon_notes row (optionally joined with profiles) to a NoteResponse"""
    author = row.get("profiles")
    return NoteResponse(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        privacy=row["privacy"],
        church_id=row.get("church_id"),
        content=sermon_content_from_row(row),
        author=NoteAuthor(**author) if author else None,
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


class FeedComposer:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _page_size(self, limit: Optional[int]) -> int:
        size = limit or settings.feed_page_size
        return max(1, min(size, settings.feed_max_page_size))

    def _scoped_query(self, scope: FeedScope, ctx: RequestContext):
        query = self.supabase.table("sermon_notes").select(NOTE_WITH_AUTHOR)
        if scope.mode == FeedMode.BY_AUTHOR:
            query = query.eq("user_id", scope.target_id)
            # Authors see all their own notes; everyone else sees the public ones
            if ctx.viewer_id != scope.target_id:
                query = query.eq("privacy", NotePrivacy.PUBLIC.value)
        elif scope.mode == FeedMode.BY_GROUP:
            query = query.eq("church_id", scope.target_id)\
                .in_("privacy", [NotePrivacy.PUBLIC.value, NotePrivacy.CHURCH.value])
        else:
            query = query.eq("privacy", NotePrivacy.PUBLIC.value)
        return query

    def compose(
        self,
        scope: FeedScope,
        ctx: RequestContext,
        cursor: Optional[str] = None,
        limit: Optional[int] = None
    ) -> FeedPage:
        """Fetch one page of the feed, newest first"""
        size = self._page_size(limit)
        query = self._scoped_query(scope, ctx)
        if cursor:
            created_at, note_id = decode_cursor(cursor)
            ts, nid = _quote(created_at), _quote(note_id)
            query = query.or_(f"created_at.lt.{ts},and(created_at.eq.{ts},id.lt.{nid})")

        try:
            result = query.order("created_at", desc=True)\
                .order("id", desc=True)\
                .limit(size + 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching {scope.mode.value} feed: {e}")
            raise RemoteFailure(str(e))

        rows = result.data or []
        next_cursor = None
        if len(rows) > size:
            rows = rows[:size]
            last = rows[-1]
            next_cursor = encode_cursor(last["created_at"], last["id"])
        return FeedPage(items=[note_from_row(row) for row in rows], next_cursor=next_cursor)
