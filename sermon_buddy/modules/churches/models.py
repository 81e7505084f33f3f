# Supabase table: churches
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

churches:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
    legacy rows: JSON text {"description": ..., "location": {"city", "state", "zipCode"}}
    migrated rows: plain caption text
- location: jsonb (nullable) - {"city", "state", "zipCode"}; null on legacy rows
- image_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Membership is not a separate table: profiles.church_id points at the church and
profiles.church_role ('member' | 'admin') carries the role.
"""
