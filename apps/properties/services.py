"""Property domain services.

Read-only availability projection plus the owner toggles of the
``available`` flag. Availability itself is decided by the booking
calendar (``apps.bookings.services.is_property_available``).
"""

from __future__ import annotations

from datetime import date

import structlog  # type: ignore
from django.db import transaction  # type: ignore

from shared.domain.exceptions import InvalidInput, NotFound

from .models import Property

logger = structlog.get_logger(__name__)


def lock_property(property_id) -> Property:
    """Load a property and take a row lock on it for the current transaction.

    All calendar and rollup writers of one property go through this lock,
    so they are serialized by the database. Must be called inside
    ``transaction.atomic()``.
    """

    try:
        return Property.objects.select_for_update().get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError):
        raise NotFound("Property not found.", code="property_not_found")


def get_property(property_id) -> Property:
    try:
        return Property.objects.get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError):
        raise NotFound("Property not found.", code="property_not_found")


def check_property_availability(property_id, check_in: date | None, check_out: date | None) -> bool:
    """Answer whether ``property_id`` is free on ``[check_in, check_out)``.

    Pure query: nothing is written and no lock is held after it returns.
    """

    from apps.bookings.services import is_property_available

    if check_in is None or check_out is None:
        raise InvalidInput("Both check-in and check-out dates are required.", code="invalid_dates")
    if check_out <= check_in:
        raise InvalidInput("Check-out date must be after check-in date.", code="invalid_dates")

    property_obj = get_property(property_id)
    return is_property_available(property_obj, check_in, check_out)


def _set_available(property_id, value: bool) -> Property:
    with transaction.atomic():
        property_obj = lock_property(property_id)
        if property_obj.available != value:
            property_obj.available = value
            property_obj.save(update_fields=["available", "updated_at"])
            logger.info(
                "property_availability_changed",
                property_id=property_obj.pk,
                available=value,
            )
    return property_obj


def make_property_available(property_id) -> Property:
    return _set_available(property_id, True)


def make_property_unavailable(property_id) -> Property:
    """Withdraw the property from new bookings; existing bookings are untouched."""
    return _set_available(property_id, False)
