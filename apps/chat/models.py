"""Chat domain models for StayHub.

A conversation belongs to one booking and is created together with it.
Messages keep insertion order: the monotonic primary key is the order.
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Conversation(models.Model):
    """Message thread between the guest and the owner of a booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="conversation",
    )
    active = models.BooleanField(
        default=True,
        help_text=_("Cleared when the booking is cancelled."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Conversation")
        verbose_name_plural = _("Conversations")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Conversation {self.id} (booking {self.booking_id})"

    def participant_ids(self) -> tuple:
        """(guest id, owner id) of the booking this thread belongs to."""
        return (self.booking.guest_id, self.booking.property.owner_id)

    def counterpart_id(self, user_id):
        guest_id, owner_id = self.participant_ids()
        if user_id == guest_id:
            return owner_id
        if user_id == owner_id:
            return guest_id
        return None


class Message(models.Model):
    """A single message in a conversation."""

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Message")
        verbose_name_plural = _("Messages")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["conversation", "id"], name="message_thread_order_idx"),
            models.Index(fields=["conversation", "is_read"], name="message_thread_unread_idx"),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Message from {self.sender_id} at {self.sent_at}: {preview}"
