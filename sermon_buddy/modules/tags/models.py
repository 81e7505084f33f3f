# Supabase tables: tags, sermon_tags
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tags:
- id: uuid (primary key)
- name: text (unique, not null) - lower-cased, trimmed
- created_at: timestamp (default: now())

sermon_tags:
- sermon_id: uuid (foreign key to sermon_notes.id, not null)
- tag_id: uuid (foreign key to tags.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (sermon_id, tag_id)

Database function:
- get_trending_tags() -> setof (id, name, created_at, _count), ranked server-side
"""
