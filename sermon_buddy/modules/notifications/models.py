# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - recipient
- type: text (not null) - 'follow' | 'praise' | 'comment'
- content: text (not null) - display text
- read: boolean (default: false)
- created_at: timestamp (default: now())
"""
