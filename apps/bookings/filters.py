"""FilterSet definitions for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filter bookings by property, status, role and date window."""

    property = django_filters.NumberFilter(field_name="property_id")
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    # Bookings intersecting [date_from, date_to)
    date_from = django_filters.DateFilter(field_name="check_out", lookup_expr="gt")
    date_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lt")
    role = django_filters.ChoiceFilter(
        choices=(("guest", "guest"), ("host", "host")),
        method="filter_role",
    )

    class Meta:
        model = Booking
        fields = ["property", "status"]

    def filter_role(self, queryset, name, value):  # type: ignore
        user = getattr(self.request, "user", None)
        if user is None or not user.is_authenticated:
            return queryset.none()
        if value == "guest":
            return queryset.filter(guest=user)
        return queryset.filter(property__owner=user)
