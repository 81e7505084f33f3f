"""
Supabase client holders.

The API talks to Supabase with the anon key so row-level security applies to
every request; the service-role client is for maintenance scripts only.
"""

import logging
from typing import Optional

from supabase import create_client, Client
from sermon_buddy.config.settings import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Optional[Client] = None
    _service_client: Optional[Client] = None

    @classmethod
    def _create(cls, key: str) -> Client:
        if not settings.supabase_url or not key:
            raise RuntimeError("SUPABASE_URL and a Supabase key must be configured")
        logger.info(f"Connecting to Supabase at {settings.supabase_url}")
        return create_client(settings.supabase_url, key)

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = cls._create(settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Falls back to the anon client when no key is set."""
        if cls._service_client is None:
            if not settings.supabase_service_role_key:
                logger.warning("SUPABASE_SERVICE_ROLE_KEY not set; using anon client, RLS will apply")
                return cls.get_client()
            cls._service_client = cls._create(settings.supabase_service_role_key)
        return cls._service_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def ping(supabase: Client) -> bool:
    """Readiness check: one head-only count against profiles"""
    try:
        supabase.table("profiles")\
            .select("id", count="exact", head=True)\
            .limit(1)\
            .execute()
        return True
    except Exception as e:
        logger.warning(f"Supabase readiness check failed: {e}")
        return False
