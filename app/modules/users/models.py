# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, equal to auth.users.id)
- email: text (unique, not null) - copied from the account at registration
- name: text (not null)
- role: text (not null) - values: admin, master, student
- profile: text (not null, default: '{}') - serialized JSON: avatar, bio, location
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Note: passwords and sessions live in auth.users, managed by Supabase Auth.
Roles are assigned at registration (master or student); admin is set by hand.
"""
