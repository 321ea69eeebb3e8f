"""Users app package.

Defines the custom user model (email login, user/admin roles) used as
AUTH_USER_MODEL. Identity verification itself is delegated to
SimpleJWT; this app only registers accounts and exposes the profile.
"""
