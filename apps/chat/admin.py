"""Admin registrations for the chat domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Conversation, Message


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ("sender", "recipient", "content", "is_read", "sent_at")
    readonly_fields = ("sent_at",)


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "active", "created_at", "updated_at")
    list_filter = ("active",)
    search_fields = ("id", "booking__id")
    inlines = (MessageInline,)
