"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import me

urlpatterns = [
    path('me/', me, name='user-me'),
]
