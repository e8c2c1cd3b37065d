"""Authentication.

Learn: Users → email/password → bcrypt check → JWT access token.
Protected routes resolve the token back to a CurrentIdentity through
the get_current_user dependency; the owner of every issue comes from it.
"""
