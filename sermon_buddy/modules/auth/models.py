# Supabase Auth
# Sign-up, login and JWT validation are handled by Supabase's auth service.
# The public profile for each auth user lives in the profiles table
# (see sermon_buddy/modules/profiles/models.py) and is written at registration.

"""
Supabase Auth calls used here:
- auth.sign_up() - Register new users (username/full_name kept in user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a bearer JWT
- auth.sign_out() - Logout users
"""
