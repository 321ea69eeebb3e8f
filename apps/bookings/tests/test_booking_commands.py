"""Tests for the booking command handlers dispatched through the message bus."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from apps.bookings.application.command_handlers import (
    ChangeBookingStatusCommand,
    CreateBookingCommand,
    DeleteBookingCommand,
    UpdateBookingCommand,
)
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged, BookingUpdated
from apps.bookings.models import Booking
from apps.chat.models import Conversation
from apps.properties.models import Property
from apps.users.models import User
from shared.application.message_bus import message_bus
from shared.domain.exceptions import Conflict, InvalidInput, NotFound


class BookingCommandTestCase(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="host@example.com", password="HostPass123")
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.other_guest = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.property = Property.objects.create(
            owner=self.owner,
            title="Steppe yurt",
            street="Road 7",
            city="Turkistan",
            country="Kazakhstan",
            price_per_night=Decimal("100.00"),
            max_guests=4,
            available=True,
        )
        self.day = date(2030, 7, 1)

    def create(self, check_in=None, nights=3, guest=None, number_of_guests=2, property_id=None) -> Booking:
        check_in = check_in or self.day
        return message_bus.handle_command(
            CreateBookingCommand(
                property_id=property_id or self.property.pk,
                guest_id=(guest or self.guest).pk,
                check_in=check_in,
                check_out=check_in + timedelta(days=nights),
                number_of_guests=number_of_guests,
            )
        )

    def assertRejected(self, error_type, code: str, command) -> None:
        with self.assertRaises(error_type) as ctx:
            message_bus.handle_command(command)
        self.assertEqual(ctx.exception.code, code)


class CreateBookingTests(BookingCommandTestCase):
    def test_creates_pending_booking_with_open_conversation(self) -> None:
        booking = self.create(nights=3)

        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.total_price, Decimal("300.00"))
        self.assertEqual(booking.guest, self.guest)
        conversation = Conversation.objects.get(booking=booking)
        self.assertTrue(conversation.active)
        self.assertEqual(conversation.messages.count(), 0)

    def test_created_event_is_published_after_commit(self) -> None:
        with patch.object(message_bus, "publish_events") as publish, \
                self.captureOnCommitCallbacks(execute=True) as callbacks:
            booking = self.create()

        self.assertEqual(len(callbacks), 1)
        (events,), _ = publish.call_args
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0], BookingCreated)
        self.assertEqual(events[0].booking_id, booking.pk)
        self.assertEqual(events[0].total_price, Decimal("300.00"))

    def test_rejected_create_publishes_nothing(self) -> None:
        self.create()
        with self.captureOnCommitCallbacks() as callbacks:
            with self.assertRaises(Conflict):
                self.create(guest=self.other_guest)
        self.assertEqual(callbacks, [])
        self.assertEqual(Booking.objects.count(), 1)
        self.assertEqual(Conversation.objects.count(), 1)

    def test_back_to_back_stays_are_admitted(self) -> None:
        self.create(nights=3)
        second = self.create(check_in=self.day + timedelta(days=3), guest=self.other_guest)
        self.assertEqual(second.status, Booking.Status.PENDING)
        self.assertEqual(Booking.objects.count(), 2)

    def test_overlap_is_a_conflict(self) -> None:
        self.create(nights=3)
        with self.assertRaises(Conflict) as ctx:
            self.create(check_in=self.day + timedelta(days=2), guest=self.other_guest)
        self.assertEqual(ctx.exception.code, "dates_conflict")

    def test_cancelled_booking_frees_its_dates(self) -> None:
        first = self.create(nights=3)
        message_bus.handle_command(
            ChangeBookingStatusCommand(booking_id=first.pk, status=Booking.Status.CANCELLED)
        )
        second = self.create(guest=self.other_guest)
        self.assertEqual(second.check_in, first.check_in)

    def test_invalid_dates_are_checked_first(self) -> None:
        self.assertRejected(
            InvalidInput,
            "invalid_dates",
            CreateBookingCommand(
                property_id=424242,
                guest_id=424242,
                check_in=self.day,
                check_out=self.day,
                number_of_guests=99,
            ),
        )
        self.assertRejected(
            InvalidInput,
            "invalid_dates",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=self.guest.pk,
                check_in=self.day,
                check_out=self.day - timedelta(days=1),
            ),
        )

    def test_missing_property_before_missing_guest(self) -> None:
        self.assertRejected(
            NotFound,
            "property_not_found",
            CreateBookingCommand(
                property_id=424242,
                guest_id=424242,
                check_in=self.day,
                check_out=self.day + timedelta(days=1),
            ),
        )

    def test_unavailable_property_is_not_bookable(self) -> None:
        self.property.available = False
        self.property.save()
        self.assertRejected(
            NotFound,
            "property_not_found",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=self.guest.pk,
                check_in=self.day,
                check_out=self.day + timedelta(days=1),
            ),
        )

    def test_missing_guest_before_date_conflict(self) -> None:
        self.create(nights=3)
        self.assertRejected(
            NotFound,
            "guest_not_found",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=424242,
                check_in=self.day,
                check_out=self.day + timedelta(days=3),
            ),
        )

    def test_date_conflict_before_capacity(self) -> None:
        self.create(nights=3)
        self.assertRejected(
            Conflict,
            "dates_conflict",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=self.other_guest.pk,
                check_in=self.day,
                check_out=self.day + timedelta(days=1),
                number_of_guests=6,
            ),
        )

    def test_capacity_exceeded(self) -> None:
        self.assertRejected(
            InvalidInput,
            "capacity_exceeded",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=self.guest.pk,
                check_in=self.day,
                check_out=self.day + timedelta(days=1),
                number_of_guests=6,
            ),
        )
        self.assertFalse(Booking.objects.exists())

    def test_guest_count_must_be_positive(self) -> None:
        self.assertRejected(
            InvalidInput,
            "invalid_guest_count",
            CreateBookingCommand(
                property_id=self.property.pk,
                guest_id=self.guest.pk,
                check_in=self.day,
                check_out=self.day + timedelta(days=1),
                number_of_guests=0,
            ),
        )

    def test_price_uses_rate_at_admission(self) -> None:
        booking = self.create(nights=2)
        Property.objects.filter(pk=self.property.pk).update(price_per_night=Decimal("500.00"))
        booking.refresh_from_db()
        self.assertEqual(booking.total_price, Decimal("200.00"))


class UpdateBookingTests(BookingCommandTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = self.create(nights=3)

    def test_moving_dates_recomputes_price(self) -> None:
        updated = message_bus.handle_command(
            UpdateBookingCommand(booking_id=self.booking.pk, check_out=self.day + timedelta(days=5))
        )
        self.assertEqual(updated.check_in, self.day)
        self.assertEqual(updated.total_price, Decimal("500.00"))

    def test_shifting_within_own_range_is_allowed(self) -> None:
        updated = message_bus.handle_command(
            UpdateBookingCommand(
                booking_id=self.booking.pk,
                check_in=self.day + timedelta(days=1),
                check_out=self.day + timedelta(days=4),
            )
        )
        self.assertEqual(updated.nights, 3)

    def test_moving_onto_another_booking_is_a_conflict(self) -> None:
        self.create(check_in=self.day + timedelta(days=5), guest=self.other_guest)
        self.assertRejected(
            Conflict,
            "dates_conflict",
            UpdateBookingCommand(booking_id=self.booking.pk, check_out=self.day + timedelta(days=6)),
        )
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.check_out, self.day + timedelta(days=3))

    def test_merged_dates_must_stay_valid(self) -> None:
        self.assertRejected(
            InvalidInput,
            "invalid_dates",
            UpdateBookingCommand(booking_id=self.booking.pk, check_in=self.day + timedelta(days=3)),
        )

    def test_guest_count_is_checked_against_capacity(self) -> None:
        self.assertRejected(
            InvalidInput,
            "capacity_exceeded",
            UpdateBookingCommand(booking_id=self.booking.pk, number_of_guests=5),
        )
        updated = message_bus.handle_command(
            UpdateBookingCommand(booking_id=self.booking.pk, number_of_guests=4)
        )
        self.assertEqual(updated.number_of_guests, 4)

    def test_property_and_guest_are_immutable(self) -> None:
        other = Property.objects.create(
            owner=self.owner,
            title="Second flat",
            street="Road 8",
            city="Turkistan",
            country="Kazakhstan",
            price_per_night=Decimal("50.00"),
            available=True,
        )
        self.assertRejected(
            InvalidInput,
            "immutable_field",
            UpdateBookingCommand(booking_id=self.booking.pk, property_id=other.pk),
        )
        self.assertRejected(
            InvalidInput,
            "immutable_field",
            UpdateBookingCommand(booking_id=self.booking.pk, guest_id=self.other_guest.pk),
        )

    def test_cancelled_booking_dates_are_not_guarded(self) -> None:
        self.create(check_in=self.day + timedelta(days=5), guest=self.other_guest)
        message_bus.handle_command(
            ChangeBookingStatusCommand(booking_id=self.booking.pk, status=Booking.Status.CANCELLED)
        )
        updated = message_bus.handle_command(
            UpdateBookingCommand(booking_id=self.booking.pk, check_out=self.day + timedelta(days=7))
        )
        self.assertEqual(updated.check_out, self.day + timedelta(days=7))

    def test_status_and_dates_in_one_update(self) -> None:
        with patch.object(message_bus, "publish_events") as publish, \
                self.captureOnCommitCallbacks(execute=True):
            message_bus.handle_command(
                UpdateBookingCommand(
                    booking_id=self.booking.pk,
                    status=Booking.Status.CONFIRMED,
                    check_out=self.day + timedelta(days=4),
                )
            )

        (events,), _ = publish.call_args
        self.assertEqual([type(e) for e in events], [BookingUpdated, BookingStatusChanged])
        self.assertEqual(set(events[0].changes), {"status", "check_in", "check_out"})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.total_price, Decimal("400.00"))

    def test_noop_update_changes_nothing(self) -> None:
        with self.captureOnCommitCallbacks() as callbacks:
            message_bus.handle_command(UpdateBookingCommand(booking_id=self.booking.pk))
        self.assertEqual(callbacks, [])

    def test_missing_booking(self) -> None:
        self.assertRejected(
            NotFound,
            "booking_not_found",
            UpdateBookingCommand(booking_id=424242, number_of_guests=1),
        )


class BookingStatusTests(BookingCommandTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = self.create()

    def change(self, status: str) -> Booking:
        return message_bus.handle_command(
            ChangeBookingStatusCommand(booking_id=self.booking.pk, status=status)
        )

    def test_confirm_then_cancel(self) -> None:
        self.assertEqual(self.change(Booking.Status.CONFIRMED).status, Booking.Status.CONFIRMED)
        self.assertEqual(self.change(Booking.Status.CANCELLED).status, Booking.Status.CANCELLED)

    def test_reconfirming_is_a_silent_noop(self) -> None:
        self.change(Booking.Status.CONFIRMED)
        with self.captureOnCommitCallbacks() as callbacks:
            self.change(Booking.Status.CONFIRMED)
        self.assertEqual(callbacks, [])

    def test_confirmed_cannot_go_back_to_pending(self) -> None:
        self.change(Booking.Status.CONFIRMED)
        self.assertRejected(
            Conflict,
            "invalid_transition",
            ChangeBookingStatusCommand(booking_id=self.booking.pk, status=Booking.Status.PENDING),
        )

    def test_cancelled_is_terminal(self) -> None:
        self.change(Booking.Status.CANCELLED)
        for status in (Booking.Status.PENDING, Booking.Status.CONFIRMED, Booking.Status.CANCELLED):
            self.assertRejected(
                Conflict,
                "invalid_transition",
                ChangeBookingStatusCommand(booking_id=self.booking.pk, status=status),
            )

    def test_unknown_status_is_rejected(self) -> None:
        self.assertRejected(
            Conflict,
            "invalid_transition",
            ChangeBookingStatusCommand(booking_id=self.booking.pk, status="archived"),
        )

    def test_cancel_closes_conversation(self) -> None:
        self.change(Booking.Status.CANCELLED)
        conversation = Conversation.objects.get(booking=self.booking)
        self.assertFalse(conversation.active)

    def test_status_event_carries_both_statuses(self) -> None:
        with patch.object(message_bus, "publish_events") as publish, \
                self.captureOnCommitCallbacks(execute=True):
            self.change(Booking.Status.CONFIRMED)

        (events,), _ = publish.call_args
        self.assertIsInstance(events[0], BookingStatusChanged)
        self.assertEqual(events[0].old_status, Booking.Status.PENDING)
        self.assertEqual(events[0].new_status, Booking.Status.CONFIRMED)


class DeleteBookingTests(BookingCommandTestCase):
    def test_delete_removes_booking_and_conversation(self) -> None:
        booking = self.create()
        message_bus.handle_command(DeleteBookingCommand(booking_id=booking.pk))
        self.assertFalse(Booking.objects.filter(pk=booking.pk).exists())
        self.assertFalse(Conversation.objects.exists())

    def test_delete_missing_booking(self) -> None:
        self.assertRejected(NotFound, "booking_not_found", DeleteBookingCommand(booking_id=424242))


class BookingParticipantTests(BookingCommandTestCase):
    def test_guest_and_owner_take_part_in_the_booking(self) -> None:
        booking = self.create()

        self.assertTrue(booking.is_participant(self.guest))
        self.assertTrue(booking.is_participant(self.owner))
        self.assertFalse(booking.is_participant(self.other_guest))
        self.assertFalse(booking.is_participant(AnonymousUser()))

    def test_guest_count_at_capacity_is_admitted(self) -> None:
        booking = self.create(number_of_guests=self.property.max_guests)

        self.assertEqual(booking.number_of_guests, 4)
        self.assertTrue(self.property.accepts_guests(4))
        self.assertFalse(self.property.accepts_guests(5))
