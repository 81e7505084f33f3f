# Supabase tables: sermon_praises, sermon_comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sermon_praises:
- id: uuid (primary key)
- sermon_id: uuid (foreign key to sermon_notes.id, not null)
- user_id: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (sermon_id, user_id)

sermon_comments:
- id: uuid (primary key)
- sermon_id: uuid (foreign key to sermon_notes.id, not null)
- user_id: uuid (foreign key to profiles.id, not null)
- content: text (not null)
- created_at: timestamp (default: now())
"""
