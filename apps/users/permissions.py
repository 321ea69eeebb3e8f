"""Permission helpers shared by the marketplace API views."""

from __future__ import annotations


def is_platform_admin(user) -> bool:
    """True for authenticated accounts with the admin role or Django staff flags."""
    if not user or not user.is_authenticated:
        return False
    return hasattr(user, "is_platform_admin") and user.is_platform_admin()
