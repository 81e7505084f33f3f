"""
Search fan-out across people, churches and public sermon notes.

The Supabase client is synchronous, so each category query runs in a worker
thread and the three are awaited together. Every category reports its own
outcome; deciding what a failure means is left to the caller.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from supabase import Client

from sermon_buddy.config.settings import settings
from sermon_buddy.modules.notes.schemas import NotePrivacy
from sermon_buddy.modules.search.schemas import SearchResultKind

logger = logging.getLogger(__name__)

# Fixed presentation order of categories
CATEGORY_ORDER = (SearchResultKind.USER, SearchResultKind.CHURCH, SearchResultKind.SERMON)

# Characters with meaning in PostgREST filter strings
_RESERVED = re.compile(r'[,()"\\]')


def clean_search_term(term: Optional[str]) -> str:
    """Trim the term and drop characters that would break a PostgREST filter; '' means no search."""
    if not term:
        return ""
    return _RESERVED.sub("", term.strip()).strip()


@dataclass
class CategoryOutcome:
    kind: SearchResultKind
    rows: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SearchEngine:
    def __init__(self, supabase: Client, per_category_limit: Optional[int] = None):
        self.supabase = supabase
        self.per_category_limit = per_category_limit or settings.search_results_per_category

    def search_people(self, pattern: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("profiles")\
            .select("id, username, full_name, avatar_url")\
            .or_(f"username.ilike.{pattern},full_name.ilike.{pattern}")\
            .limit(self.per_category_limit)\
            .execute()
        return result.data or []

    def search_churches(self, pattern: str) -> List[Dict[str, Any]]:
        # "*" rather than a column list: location exists only after migration
        result = self.supabase.table("churches")\
            .select("*")\
            .ilike("name", pattern)\
            .limit(self.per_category_limit)\
            .execute()
        return result.data or []

    def search_sermons(self, pattern: str) -> List[Dict[str, Any]]:
        # !inner drops notes whose author row is missing
        result = self.supabase.table("sermon_notes")\
            .select("id, title, content, profiles!inner(username)")\
            .or_(f"title.ilike.{pattern},content.ilike.{pattern}")\
            .eq("privacy", NotePrivacy.PUBLIC.value)\
            .limit(self.per_category_limit)\
            .execute()
        return result.data or []

    def _queries(self) -> Dict[SearchResultKind, Callable[[str], List[Dict[str, Any]]]]:
        return {
            SearchResultKind.USER: self.search_people,
            SearchResultKind.CHURCH: self.search_churches,
            SearchResultKind.SERMON: self.search_sermons,
        }

    async def fan_out(self, term: str) -> List[CategoryOutcome]:
        """
        Run all category queries concurrently for an already-cleaned term.

        Returns one outcome per category in CATEGORY_ORDER. Nothing is queried
        for a blank term.
        """
        if not term:
            return []
        pattern = f"%{term}%"
        queries = self._queries()
        results = await asyncio.gather(
            *(asyncio.to_thread(queries[kind], pattern) for kind in CATEGORY_ORDER),
            return_exceptions=True,
        )

        outcomes = []
        for kind, result in zip(CATEGORY_ORDER, results):
            if isinstance(result, BaseException):
                logger.error(f"Search category {kind.value} failed: {result}")
                outcomes.append(CategoryOutcome(kind=kind, error=result))
            else:
                outcomes.append(CategoryOutcome(kind=kind, rows=result))
        return outcomes
