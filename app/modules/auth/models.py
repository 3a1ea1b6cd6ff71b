# Supabase Auth
# This module uses Supabase's built-in authentication system
# Supabase Auth handles:
# - Account registration (auth.users table)
# - Email/password sessions
# - JWT token generation and validation
# - Password hashing and security

"""
Account/session operations used by the application:
- auth.sign_up() - create an account (id, email, password, name)
- auth.sign_in_with_password() - create a session
- auth.get_user() - resolve the account behind a session token
- auth.sign_out() - end the session

The role-bearing user document lives in the `users` table (see
app/modules/users/models.py) and shares its id with the account.
"""
