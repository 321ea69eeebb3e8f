"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Admit a new pending booking
- UpdateBookingCommand: Change dates, guest count or status
- ChangeBookingStatusCommand: Move a booking through the status machine
- DeleteBookingCommand: Hard-delete a booking (admin cleanup)

Every handler opens one DjangoUnitOfWork and locks the parent property
row first, so all calendar writers of one property run one at a time.
A loser of a race re-reads the committed calendar and is rejected with
``dates_conflict``.
"""

from dataclasses import dataclass
from datetime import date

import structlog
from django.contrib.auth import get_user_model

from apps.bookings.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingStatusChanged,
    BookingUpdated,
)
from apps.bookings.models import Booking
from apps.bookings.services import calculate_total_price, is_property_available
from apps.chat.services import close_conversation, open_conversation
from apps.properties.services import lock_property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Conflict, InvalidInput, NotFound

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    """
    property_id: int
    guest_id: int
    check_in: date
    check_out: date
    number_of_guests: int = 1


@dataclass
class UpdateBookingCommand:
    """
    Command to update a booking

    ``None`` means "leave unchanged". ``property_id`` and ``guest_id``
    are accepted only to reject attempts to move a booking.
    """
    booking_id: int
    check_in: date | None = None
    check_out: date | None = None
    number_of_guests: int | None = None
    status: str | None = None
    property_id: int | None = None
    guest_id: int | None = None


@dataclass
class ChangeBookingStatusCommand:
    """Command to confirm or cancel a booking"""
    booking_id: int
    status: str


@dataclass
class DeleteBookingCommand:
    """Command to hard-delete a booking"""
    booking_id: int


# ===== Validation helpers =====

def _validate_dates(check_in, check_out) -> None:
    if check_in is None or check_out is None or check_out <= check_in:
        raise InvalidInput(
            "Check-out date must be after check-in date.", code="invalid_dates"
        )


def _validate_guest_count(property_obj, number_of_guests: int) -> None:
    if number_of_guests is None or number_of_guests < 1:
        raise InvalidInput(
            "At least one guest is required.", code="invalid_guest_count"
        )
    if not property_obj.accepts_guests(number_of_guests):
        raise InvalidInput(
            f"The property accepts at most {property_obj.max_guests} guests.",
            code="capacity_exceeded",
        )


def _validate_transition(booking: Booking, new_status: str) -> None:
    if not booking.can_transition_to(new_status):
        raise Conflict(
            f"Cannot change booking status from {booking.status} to {new_status}.",
            code="invalid_transition",
        )


def _lock_booking(booking_id):
    """
    Lock the parent property, then the booking itself

    The property lock comes first for every writer so two handlers never
    wait on each other in opposite order.
    """
    property_id = (
        Booking.objects.filter(pk=booking_id)
        .values_list("property_id", flat=True)
        .first()
    )
    if property_id is None:
        raise NotFound("Booking not found.", code="booking_not_found")

    property_obj = lock_property(property_id)
    try:
        booking = Booking.objects.select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFound("Booking not found.", code="booking_not_found")
    booking.property = property_obj
    return booking


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Checks run in a fixed order and the first failure wins:
    dates, property, guest, calendar, guest count.
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        log = logger.bind(
            property_id=command.property_id,
            guest_id=command.guest_id,
            check_in=str(command.check_in),
            check_out=str(command.check_out),
        )

        _validate_dates(command.check_in, command.check_out)

        with DjangoUnitOfWork() as uow:
            property_obj = lock_property(command.property_id)
            if not property_obj.available:
                raise NotFound(
                    "Property not found or not available for booking.",
                    code="property_not_found",
                )

            User = get_user_model()
            guest = User.objects.filter(pk=command.guest_id).first()
            if guest is None:
                raise NotFound("Guest not found.", code="guest_not_found")

            if not is_property_available(property_obj, command.check_in, command.check_out):
                log.info("booking_rejected", reason="dates_conflict")
                raise Conflict(
                    "The property is already booked for the selected dates.",
                    code="dates_conflict",
                )

            _validate_guest_count(property_obj, command.number_of_guests)

            booking = Booking.objects.create(
                property=property_obj,
                guest=guest,
                check_in=command.check_in,
                check_out=command.check_out,
                number_of_guests=command.number_of_guests,
                total_price=calculate_total_price(
                    property_obj.price_per_night, command.check_in, command.check_out
                ),
                status=Booking.Status.PENDING,
            )
            open_conversation(booking)

            uow.add_event(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                property_id=property_obj.pk,
                guest_id=guest.pk,
                check_in=booking.check_in,
                check_out=booking.check_out,
                total_price=booking.total_price,
            ))

        log.info("booking_created", booking_id=booking.pk, total_price=str(booking.total_price))
        return booking


class UpdateBookingHandler:
    """
    Handler for UpdateBooking command

    A date change re-validates the merged range, re-checks the calendar
    (skipping the booking itself) when the resulting status occupies it,
    and recomputes the price from the current nightly rate.
    """

    def handle(self, command: UpdateBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(command.booking_id)
            property_obj = booking.property

            if command.property_id is not None and command.property_id != booking.property_id:
                raise InvalidInput("The property of a booking cannot be changed.", code="immutable_field")
            if command.guest_id is not None and command.guest_id != booking.guest_id:
                raise InvalidInput("The guest of a booking cannot be changed.", code="immutable_field")

            changes = {}
            update_fields = []
            old_status = booking.status

            if command.status is not None:
                _validate_transition(booking, command.status)
            if command.status is not None and command.status != booking.status:
                changes["status"] = (booking.status, command.status)
                booking.status = command.status
                update_fields.append("status")

            check_in = command.check_in if command.check_in is not None else booking.check_in
            check_out = command.check_out if command.check_out is not None else booking.check_out
            if (check_in, check_out) != (booking.check_in, booking.check_out):
                _validate_dates(check_in, check_out)
                if booking.blocks_calendar and not is_property_available(
                    property_obj, check_in, check_out, exclude_booking_id=booking.pk
                ):
                    raise Conflict(
                        "The property is already booked for the selected dates.",
                        code="dates_conflict",
                    )
                changes["check_in"] = (booking.check_in, check_in)
                changes["check_out"] = (booking.check_out, check_out)
                booking.check_in = check_in
                booking.check_out = check_out
                booking.total_price = calculate_total_price(
                    property_obj.price_per_night, check_in, check_out
                )
                update_fields += ["check_in", "check_out", "total_price"]

            if command.number_of_guests is not None and command.number_of_guests != booking.number_of_guests:
                _validate_guest_count(property_obj, command.number_of_guests)
                changes["number_of_guests"] = (booking.number_of_guests, command.number_of_guests)
                booking.number_of_guests = command.number_of_guests
                update_fields.append("number_of_guests")

            if not update_fields:
                return booking

            booking.save(update_fields=update_fields + ["updated_at"])
            if "status" in changes and booking.status == Booking.Status.CANCELLED:
                close_conversation(booking)

            uow.add_event(BookingUpdated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                property_id=booking.property_id,
                changes={key: [str(old), str(new)] for key, (old, new) in changes.items()},
            ))
            if "status" in changes:
                uow.add_event(BookingStatusChanged(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    property_id=booking.property_id,
                    old_status=old_status,
                    new_status=booking.status,
                ))

        logger.info("booking_updated", booking_id=booking.pk, fields=sorted(changes))
        return booking


class ChangeBookingStatusHandler:
    """
    Handler for status transitions

    pending -> confirmed | cancelled, confirmed -> confirmed | cancelled.
    Nothing leaves cancelled.
    """

    def handle(self, command: ChangeBookingStatusCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(command.booking_id)
            _validate_transition(booking, command.status)

            old_status = booking.status
            if old_status == command.status:
                return booking

            booking.status = command.status
            booking.save(update_fields=["status", "updated_at"])
            if booking.status == Booking.Status.CANCELLED:
                close_conversation(booking)

            uow.add_event(BookingStatusChanged(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                property_id=booking.property_id,
                old_status=old_status,
                new_status=booking.status,
            ))

        logger.info(
            "booking_status_changed",
            booking_id=booking.pk,
            old_status=old_status,
            new_status=booking.status,
        )
        return booking


class DeleteBookingHandler:
    """Handler for hard deletion; the conversation goes with the booking"""

    def handle(self, command: DeleteBookingCommand) -> None:
        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(command.booking_id)
            booking_id, property_id = booking.pk, booking.property_id
            booking.delete()

            uow.add_event(BookingDeleted(
                aggregate_id=booking_id,
                booking_id=booking_id,
                property_id=property_id,
            ))

        logger.info("booking_deleted", booking_id=booking_id, property_id=property_id)


create_booking_handler = CreateBookingHandler()
update_booking_handler = UpdateBookingHandler()
change_booking_status_handler = ChangeBookingStatusHandler()
delete_booking_handler = DeleteBookingHandler()


def register_handlers(bus) -> None:
    """Wire the booking commands onto ``bus`` (called from AppConfig.ready)."""
    bus.register_command_handler(CreateBookingCommand, create_booking_handler.handle)
    bus.register_command_handler(UpdateBookingCommand, update_booking_handler.handle)
    bus.register_command_handler(ChangeBookingStatusCommand, change_booking_status_handler.handle)
    bus.register_command_handler(DeleteBookingCommand, delete_booking_handler.handle)
