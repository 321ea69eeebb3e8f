"""
Booking Event Handlers

Subscribers run after the booking transaction has committed. They only
write audit log lines; the booking state itself is already final.
"""

import structlog

from apps.bookings.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingStatusChanged,
    BookingUpdated,
)

logger = structlog.get_logger("apps.bookings.audit")


def log_booking_created(event: BookingCreated) -> None:
    logger.info(
        "audit.booking_created",
        **event.to_dict(),
        property_id=event.property_id,
        guest_id=event.guest_id,
        check_in=event.check_in.isoformat(),
        check_out=event.check_out.isoformat(),
        total_price=str(event.total_price),
    )


def log_booking_updated(event: BookingUpdated) -> None:
    logger.info(
        "audit.booking_updated",
        **event.to_dict(),
        property_id=event.property_id,
        changes=event.changes,
    )


def log_booking_status_changed(event: BookingStatusChanged) -> None:
    logger.info(
        "audit.booking_status_changed",
        **event.to_dict(),
        property_id=event.property_id,
        old_status=event.old_status,
        new_status=event.new_status,
    )


def log_booking_deleted(event: BookingDeleted) -> None:
    logger.warning("audit.booking_deleted", **event.to_dict(), property_id=event.property_id)


def register_handlers(bus) -> None:
    bus.register_event_handler(BookingCreated, log_booking_created)
    bus.register_event_handler(BookingUpdated, log_booking_updated)
    bus.register_event_handler(BookingStatusChanged, log_booking_status_changed)
    bus.register_event_handler(BookingDeleted, log_booking_deleted)
