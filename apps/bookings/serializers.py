"""Serializers for the booking domain.

Write serializers only check field types; the ordered business checks
(dates, availability, capacity, transitions) belong to the command
handlers so that every rejection carries its domain error code.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    property_id = serializers.ReadOnlyField()
    property_title = serializers.ReadOnlyField(source="property.title")
    guest = UserShortSerializer(read_only=True)
    nights = serializers.ReadOnlyField()
    conversation_id = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "property_id",
            "property_title",
            "guest",
            "check_in",
            "check_out",
            "nights",
            "number_of_guests",
            "status",
            "total_price",
            "conversation_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_conversation_id(self, obj: Booking) -> str | None:
        conversation = getattr(obj, "conversation", None)
        return str(conversation.pk) if conversation else None


class BookingCreateSerializer(serializers.Serializer):
    """Guest request for a stay; the guest is the authenticated user."""

    property = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    number_of_guests = serializers.IntegerField(default=1)


class BookingUpdateSerializer(serializers.Serializer):
    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    number_of_guests = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=Booking.Status.choices, required=False)
    # Accepted only so that attempts to move a booking are rejected explicitly
    property = serializers.IntegerField(required=False)
    guest = serializers.IntegerField(required=False)
