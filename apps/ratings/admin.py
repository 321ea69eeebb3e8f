"""Admin registrations for ratings."""

from __future__ import annotations

from django.contrib import admin

from .models import Rating


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ('property', 'user', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('property__title', 'user__email', 'review')
    filter_horizontal = ('helpful',)
    readonly_fields = ('created_at', 'updated_at')
