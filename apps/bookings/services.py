"""Domain services for booking workflows.

Pricing is a pure function of the nightly rate and the stay; the
availability guard scans the calendar of one property. Neither commits
anything: callers run them inside the unit of work that holds the
property row lock.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def count_nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def calculate_total_price(nightly_rate: Decimal, check_in: date, check_out: date) -> Decimal:
    """Nightly rate times the number of nights; no rounding, no fees.

    ``check_out > check_in`` is the caller's precondition.
    """

    return Decimal(nightly_rate) * count_nights(check_in, check_out)


def overlap_filter(check_in: date, check_out: date) -> Q:
    """Stays intersecting ``[check_in, check_out)``.

    Ranges are half-open, so a stay may start on the day another ends.
    """

    return Q(check_in__lt=check_out) & Q(check_out__gt=check_in)


def blocking_bookings_between(check_in: date, check_out: date):
    """Pending or confirmed bookings of any property that intersect the stay."""

    from .models import Booking  # Local import to prevent circular dependency

    return Booking.objects.filter(
        status__in=Booking.BLOCKING_STATUSES,
    ).filter(overlap_filter(check_in, check_out))


def overlapping_bookings(property_obj, check_in: date, check_out: date, *, exclude_booking_id=None):
    """Calendar-occupying bookings of ``property_obj`` that intersect the stay."""

    bookings_qs = blocking_bookings_between(check_in, check_out).filter(property=property_obj)

    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(pk=exclude_booking_id)

    return bookings_qs


def is_property_available(
    property_obj,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
) -> bool:
    """True when no pending or confirmed booking overlaps ``[check_in, check_out)``."""

    bookings_qs = overlapping_bookings(
        property_obj,
        check_in,
        check_out,
        exclude_booking_id=exclude_booking_id,
    )
    bookings_qs = _lock_queryset_if_possible(bookings_qs)
    return not bookings_qs.exists()
