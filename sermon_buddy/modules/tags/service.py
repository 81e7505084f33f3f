import logging
from supabase import Client
from sermon_buddy.config.settings import settings
from sermon_buddy.core.exceptions import RemoteFailure
from sermon_buddy.modules.tags.schemas import TagResponse, TrendingTagResponse
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


def normalize_tag_names(names: Iterable[str]) -> List[str]:
    """Trim, lower-case and de-duplicate tag names, keeping first-seen order"""
    seen = []
    for name in names:
        cleaned = name.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class TagService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def ensure_tags(self, names: Iterable[str]) -> List[TagResponse]:
        """Return tags for the given names, creating the missing ones"""
        wanted = normalize_tag_names(names)
        if not wanted:
            return []
        try:
            existing = self.supabase.table("tags")\
                .select("id, name")\
                .in_("name", wanted)\
                .execute()
            existing_names = {row["name"] for row in existing.data}
            missing = [name for name in wanted if name not in existing_names]
            if missing:
                self.supabase.table("tags")\
                    .insert([{"name": name} for name in missing])\
                    .execute()
                logger.debug(f"Created tags: {missing}")

            all_tags = self.supabase.table("tags")\
                .select("id, name")\
                .in_("name", wanted)\
                .execute()
            by_name = {row["name"]: TagResponse(**row) for row in all_tags.data}
            return [by_name[name] for name in wanted if name in by_name]
        except Exception as e:
            logger.error(f"Error ensuring tags {wanted}: {e}")
            raise RemoteFailure(str(e))

    def attach_tags(self, sermon_id: str, names: Iterable[str]) -> List[TagResponse]:
        """Create any missing tags and link them all to the sermon note"""
        tags = self.ensure_tags(names)
        if not tags:
            return []
        try:
            self.supabase.table("sermon_tags")\
                .insert([{"sermon_id": sermon_id, "tag_id": tag.id} for tag in tags])\
                .execute()
        except Exception as e:
            logger.error(f"Error tagging sermon {sermon_id}: {e}")
            raise RemoteFailure(str(e))
        return tags

    def get_sermon_tags(self, sermon_id: str) -> List[TagResponse]:
        try:
            result = self.supabase.table("sermon_tags")\
                .select("tag_id, tags(id, name)")\
                .eq("sermon_id", sermon_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error reading tags of sermon {sermon_id}: {e}")
            raise RemoteFailure(str(e))
        tags = [TagResponse(**item["tags"]) for item in result.data if item.get("tags")]
        return sorted(tags, key=lambda tag: tag.name)

    def get_trending(self, limit: Optional[int] = None) -> List[TrendingTagResponse]:
        """Trending tags, ranked by the get_trending_tags database function"""
        try:
            result = self.supabase.rpc("get_trending_tags", {})\
                .limit(limit or settings.trending_tags_limit)\
                .execute()
            return [TrendingTagResponse(**row) for row in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching trending tags: {e}")
            raise RemoteFailure(str(e))
