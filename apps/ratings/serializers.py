"""Serializers for ratings.

Read serializer for ``Rating`` plus plain input serializers for the
write paths. Range and length rules are enforced by the rating
services; the author is taken from the request in the view.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Rating


class RatingSerializer(serializers.ModelSerializer):
    """Read serializer for ratings including related ids."""

    user = UserShortSerializer(read_only=True)
    property_id = serializers.ReadOnlyField()
    helpful_count = serializers.SerializerMethodField()

    class Meta:
        model = Rating
        fields = [
            'id',
            'user',
            'property_id',
            'rating',
            'review',
            'helpful_count',
            'created_at',
            'updated_at',
        ]

    def get_helpful_count(self, obj: Rating) -> int:
        count = getattr(obj, 'helpful_count', None)
        if count is None:
            count = obj.helpful.count()
        return count


class RatingCreateSerializer(serializers.Serializer):
    property = serializers.IntegerField()
    # Parsed, rounded and range-checked by the rating services
    rating = serializers.CharField()
    review = serializers.CharField(allow_blank=True, trim_whitespace=False)


class RatingUpdateSerializer(serializers.Serializer):
    rating = serializers.CharField(required=False)
    review = serializers.CharField(allow_blank=True, trim_whitespace=False, required=False)
