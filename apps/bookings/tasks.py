"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from itertools import groupby

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore

from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError

from .application.command_handlers import ChangeBookingStatusCommand
from .models import Booking

logger = logging.getLogger(__name__)


def find_overlapping_pairs(bookings) -> list[tuple[Booking, Booking]]:
    """
    Overlapping pairs among ``bookings`` of one property.

    ``bookings`` must be sorted by check-in. Each pair is ordered
    (earlier-created, later-created).
    """
    pairs = []
    open_bookings: list[Booking] = []
    for booking in bookings:
        open_bookings = [b for b in open_bookings if b.check_out > booking.check_in]
        for other in open_bookings:
            if other.dates.overlaps_with(booking.dates):
                first, second = sorted((other, booking), key=lambda b: (b.created_at, b.pk))
                pairs.append((first, second))
        open_bookings.append(booking)
    return pairs


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.detect_overlapping_bookings")
def detect_overlapping_bookings(cancel: bool | None = None) -> dict[str, object]:
    """
    Audit the calendars for overlapping pending/confirmed bookings.

    The command handlers serialize calendar writers per property, so an
    overlap can only come from writes that bypass them (admin edits,
    imports, raw SQL). When ``cancel`` is on (default:
    ``BOOKINGS_CANCEL_DETECTED_OVERLAPS``) the later-created booking of
    each pair is cancelled: the first writer wins.

    Returns:
        dict: {"overlaps": [[kept_id, conflicting_id], ...], "cancelled": [ids]}
    """
    if cancel is None:
        cancel = getattr(settings, "BOOKINGS_CANCEL_DETECTED_OVERLAPS", False)

    bookings = (
        Booking.objects.filter(status__in=Booking.BLOCKING_STATUSES)
        .only("pk", "property_id", "check_in", "check_out", "created_at")
        .order_by("property_id", "check_in", "pk")
    )

    overlaps: list[list[int]] = []
    cancelled: list[int] = []
    for property_id, group in groupby(list(bookings), key=lambda b: b.property_id):
        for kept, conflicting in find_overlapping_pairs(group):
            overlaps.append([kept.pk, conflicting.pk])
            logger.warning(
                f"Bookings {kept.pk} and {conflicting.pk} overlap on property {property_id}: "
                f"{kept.dates} / {conflicting.dates}"
            )
            if not cancel or conflicting.pk in cancelled or kept.pk in cancelled:
                continue
            try:
                message_bus.handle_command(
                    ChangeBookingStatusCommand(
                        booking_id=conflicting.pk,
                        status=Booking.Status.CANCELLED,
                    )
                )
            except DomainError as e:
                logger.error(f"Could not cancel overlapping booking {conflicting.pk}: {e!r}")
                continue
            cancelled.append(conflicting.pk)

    if overlaps:
        logger.warning(f"Found {len(overlaps)} overlapping booking pairs, cancelled {len(cancelled)}")
    return {"overlaps": overlaps, "cancelled": cancelled}
