"""Serializers for conversation threads."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    sender_id = serializers.IntegerField(read_only=True)
    recipient_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender_id", "recipient_id", "content", "is_read", "sent_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """Sender is the authenticated user; the recipient defaults to the counterpart."""

    recipient_id = serializers.IntegerField(required=False)
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
