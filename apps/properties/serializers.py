"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Property


class PropertySerializer(serializers.ModelSerializer):
    owner = UserShortSerializer(read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "owner",
            "title",
            "description",
            "street",
            "city",
            "country",
            "postal_code",
            "price_per_night",
            "max_guests",
            "available",
            "avg_rating",
            "total_ratings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PropertyWriteSerializer(serializers.ModelSerializer):
    """Owner-editable fields. Availability and the rollup have their own paths."""

    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "street",
            "city",
            "country",
            "postal_code",
            "price_per_night",
            "max_guests",
        ]

    def validate_max_guests(self, value: int) -> int:
        if value < 1:
            raise serializers.ValidationError("A property must accept at least one guest.")
        return value

    def to_representation(self, instance):  # type: ignore
        return PropertySerializer(instance, context=self.context).data
