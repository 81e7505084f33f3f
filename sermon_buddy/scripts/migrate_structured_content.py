"""
Migrate Structured Content Script
Moves church location and sermon metadata out of the legacy JSON-in-text
columns (churches.description, sermon_notes.content) into their own jsonb
columns (churches.location, sermon_notes.sermon_meta). Rows whose text is not
structured JSON keep the text as caption/body with empty metadata.

Run once after adding the columns; rows already migrated are skipped.
Set STRUCTURED_CONTENT_COLUMNS=true afterwards so new writes use the new layout.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from sermon_buddy.core.content import SermonMeta, parse_church_details, parse_sermon_content
from sermon_buddy.database.supabase_client import SupabaseClient
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BATCH_SIZE = 500


def _legacy_rows(supabase: Client, table: str, columns: str, marker: str):
    """Yield rows whose structured column is still null, one batch at a time"""
    while True:
        result = supabase.table(table)\
            .select(columns)\
            .is_(marker, "null")\
            .order("id")\
            .limit(BATCH_SIZE)\
            .execute()
        if not result.data:
            return
        yield from result.data
        if len(result.data) < BATCH_SIZE:
            return


def migrate_churches(supabase: Client) -> int:
    """Split each church description into caption + location"""
    logger.info("Migrating churches...")
    migrated = 0
    for row in _legacy_rows(supabase, "churches", "id, description", "location"):
        try:
            details = parse_church_details(row.get("description"))
            supabase.table("churches")\
                .update({
                    "description": details.description,
                    "location": details.location.model_dump(by_alias=True)
                })\
                .eq("id", row["id"])\
                .execute()
            migrated += 1
            logger.debug(f"Migrated church {row['id']}")
        except Exception as e:
            logger.error(f"Error migrating church {row['id']}: {e}")
            raise
    logger.info(f"Migrated {migrated} churches")
    return migrated


def migrate_sermon_notes(supabase: Client) -> int:
    """Split each sermon content blob into body + sermon_meta"""
    logger.info("Migrating sermon notes...")
    migrated = 0
    for row in _legacy_rows(supabase, "sermon_notes", "id, content", "sermon_meta"):
        try:
            content = parse_sermon_content(row.get("content"))
            meta = SermonMeta(
                pastor_name=content.pastor_name,
                church_name=content.church_name,
                bible_verses=content.bible_verses,
            )
            supabase.table("sermon_notes")\
                .update({
                    "content": content.content,
                    "sermon_meta": meta.model_dump(by_alias=True)
                })\
                .eq("id", row["id"])\
                .execute()
            migrated += 1
            logger.debug(f"Migrated sermon note {row['id']}")
        except Exception as e:
            logger.error(f"Error migrating sermon note {row['id']}: {e}")
            raise
    logger.info(f"Migrated {migrated} sermon notes")
    return migrated


def main():
    """Main function to migrate legacy content columns"""
    try:
        # Service role: RLS would hide other users' private notes
        supabase = SupabaseClient.get_service_client()

        logger.info("Starting structured content migration...")
        church_count = migrate_churches(supabase)
        note_count = migrate_sermon_notes(supabase)

        logger.info("Migration completed successfully!")
        logger.info(f"Total: {church_count} churches, {note_count} sermon notes migrated")

    except Exception as e:
        logger.error(f"Error during migration: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
