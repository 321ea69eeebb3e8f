"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """FilterSet for Property with the filters used by the listing page."""

    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    country = django_filters.CharFilter(field_name="country", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    available = django_filters.BooleanFilter(field_name="available")
    owner = django_filters.NumberFilter(field_name="owner_id")

    # Free on [check_in, check_out): both must be given
    check_in = django_filters.DateFilter(method="filter_noop")
    check_out = django_filters.DateFilter(method="filter_noop")

    class Meta:
        model = Property
        fields = ["city", "country", "available", "owner"]

    def filter_noop(self, queryset, name, value):  # type: ignore
        return queryset

    def filter_queryset(self, queryset):  # type: ignore
        queryset = super().filter_queryset(queryset)
        check_in = self.form.cleaned_data.get("check_in")
        check_out = self.form.cleaned_data.get("check_out")
        if not check_in or not check_out or check_out <= check_in:
            return queryset

        from apps.bookings.services import blocking_bookings_between

        busy = blocking_bookings_between(check_in, check_out)
        return queryset.exclude(pk__in=busy.values("property_id"))
