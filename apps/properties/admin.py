"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "city",
        "country",
        "price_per_night",
        "max_guests",
        "available",
        "avg_rating",
        "total_ratings",
        "owner",
    )
    list_filter = ("available", "city", "country")
    search_fields = ("title", "city", "street", "owner__email")
    readonly_fields = ("avg_rating", "total_ratings", "created_at", "updated_at")
