"""URL routing for conversation threads."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import ConversationMessagesView, ConversationReadView

urlpatterns = [
    path(
        "<uuid:conversation_id>/messages/",
        ConversationMessagesView.as_view(),
        name="conversation-messages",
    ),
    path(
        "<uuid:conversation_id>/read/",
        ConversationReadView.as_view(),
        name="conversation-read",
    ),
]
