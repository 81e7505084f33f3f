# Supabase table: sermon_notes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sermon_notes:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - author
- title: text (not null)
- content: text (not null)
    legacy rows: JSON text {"pastorName", "churchName", "content", "bibleVerses": [...]}
    migrated rows: the rich-text body only
- sermon_meta: jsonb (nullable) - {"pastorName", "churchName", "bibleVerses"}; null on legacy rows
- privacy: text (not null) - 'public' | 'private' | 'church'
- church_id: uuid (foreign key to churches.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Index on (created_at desc, id desc) backs the feed cursor.
"""
