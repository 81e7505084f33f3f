# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, same as auth.users.id)
- username: text (unique, not null)
- full_name: text (nullable)
- bio: text (nullable)
- avatar_url: text (nullable) - public URL in the avatars storage bucket
- church_id: uuid (foreign key to churches.id, nullable)
- church_role: text (nullable) - 'member' | 'admin'; null when church_id is null
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Profiles are never hard-deleted here; account deletion is the delete_user
database procedure.
"""
