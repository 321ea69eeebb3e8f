"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "guest",
        "status",
        "check_in",
        "check_out",
        "number_of_guests",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "check_in", "check_out")
    search_fields = ("property__title", "guest__email")
    readonly_fields = (
        "created_at",
        "updated_at",
        "total_price",
    )
