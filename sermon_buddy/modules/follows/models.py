# Supabase table: follows
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

follows:
- follower_id: uuid (foreign key to profiles.id, not null)
- following_id: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- primary key / unique constraint on (follower_id, following_id)
"""
