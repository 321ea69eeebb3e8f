"""Tests for the periodic overlap audit."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase, override_settings

from apps.bookings.models import Booking
from apps.bookings.tasks import detect_overlapping_bookings
from apps.chat.models import Conversation
from apps.properties.models import Property
from apps.users.models import User


class OverlapAuditTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="host@example.com", password="HostPass123")
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.property = Property.objects.create(
            owner=self.owner,
            title="Riverside flat",
            street="Embankment 2",
            city="Astana",
            country="Kazakhstan",
            price_per_night=Decimal("70.00"),
            max_guests=2,
            available=True,
        )
        self.day = date(2030, 8, 1)

    def _raw_booking(self, offset: int, nights: int, status=Booking.Status.PENDING, property_obj=None) -> Booking:
        """Insert a booking directly, bypassing the admission checks."""
        booking = Booking.objects.create(
            guest=self.guest,
            property=property_obj or self.property,
            check_in=self.day + timedelta(days=offset),
            check_out=self.day + timedelta(days=offset + nights),
            total_price=Decimal("70.00") * nights,
            status=status,
        )
        Conversation.objects.create(booking=booking)
        return booking

    def test_clean_calendar_reports_nothing(self) -> None:
        self._raw_booking(0, 3)
        self._raw_booking(3, 3)
        self.assertEqual(detect_overlapping_bookings(), {"overlaps": [], "cancelled": []})

    def test_later_created_booking_is_cancelled(self) -> None:
        kept = self._raw_booking(0, 4)
        conflicting = self._raw_booking(2, 4)

        result = detect_overlapping_bookings()

        self.assertEqual(result["overlaps"], [[kept.pk, conflicting.pk]])
        self.assertEqual(result["cancelled"], [conflicting.pk])
        kept.refresh_from_db()
        conflicting.refresh_from_db()
        self.assertEqual(kept.status, Booking.Status.PENDING)
        self.assertEqual(conflicting.status, Booking.Status.CANCELLED)
        self.assertFalse(Conversation.objects.get(booking=conflicting).active)

    def test_cancelled_bookings_are_ignored(self) -> None:
        self._raw_booking(0, 4)
        self._raw_booking(1, 2, status=Booking.Status.CANCELLED)
        self.assertEqual(detect_overlapping_bookings()["overlaps"], [])

    def test_each_booking_is_cancelled_once(self) -> None:
        first = self._raw_booking(0, 6)
        second = self._raw_booking(1, 2)
        third = self._raw_booking(2, 2)

        result = detect_overlapping_bookings()

        self.assertEqual(len(result["overlaps"]), 3)
        self.assertEqual(sorted(result["cancelled"]), sorted([second.pk, third.pk]))
        first.refresh_from_db()
        self.assertEqual(first.status, Booking.Status.PENDING)

    def test_other_properties_do_not_interfere(self) -> None:
        other = Property.objects.create(
            owner=self.owner,
            title="Second flat",
            street="Embankment 4",
            city="Astana",
            country="Kazakhstan",
            price_per_night=Decimal("70.00"),
            available=True,
        )
        self._raw_booking(0, 3)
        self._raw_booking(0, 3, property_obj=other)
        self.assertEqual(detect_overlapping_bookings()["overlaps"], [])

    @override_settings(BOOKINGS_CANCEL_DETECTED_OVERLAPS=False)
    def test_report_only_mode(self) -> None:
        self._raw_booking(0, 4)
        conflicting = self._raw_booking(2, 4)

        result = detect_overlapping_bookings()

        self.assertEqual(len(result["overlaps"]), 1)
        self.assertEqual(result["cancelled"], [])
        conflicting.refresh_from_db()
        self.assertEqual(conflicting.status, Booking.Status.PENDING)
