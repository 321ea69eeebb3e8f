"""Tests for property services: locking, availability projection and toggles."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.db import transaction
from django.test import TestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.properties.services import (
    check_property_availability,
    lock_property,
    make_property_available,
    make_property_unavailable,
)
from apps.users.models import User
from shared.domain.exceptions import InvalidInput, NotFound


class PropertyServicesTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="host@example.com", password="HostPass123")
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.property = Property.objects.create(
            owner=self.owner,
            title="Lake house",
            street="Shore rd, 3",
            city="Burabay",
            country="Kazakhstan",
            price_per_night=Decimal("120.00"),
            max_guests=4,
        )
        self.day = date(2030, 6, 1)

    def test_lock_property_returns_row(self) -> None:
        with transaction.atomic():
            locked = lock_property(self.property.pk)
        self.assertEqual(locked.pk, self.property.pk)

    def test_lock_missing_property(self) -> None:
        with self.assertRaises(NotFound) as ctx, transaction.atomic():
            lock_property(424242)
        self.assertEqual(ctx.exception.code, "property_not_found")

    def test_check_availability_validates_dates_first(self) -> None:
        with self.assertRaises(InvalidInput) as ctx:
            check_property_availability(424242, self.day, self.day)
        self.assertEqual(ctx.exception.code, "invalid_dates")

        with self.assertRaises(InvalidInput):
            check_property_availability(self.property.pk, None, self.day)

    def test_check_availability_for_missing_property(self) -> None:
        with self.assertRaises(NotFound):
            check_property_availability(424242, self.day, self.day + timedelta(days=1))

    def test_check_availability_ignores_available_flag(self) -> None:
        self.assertFalse(self.property.available)
        self.assertTrue(
            check_property_availability(self.property.pk, self.day, self.day + timedelta(days=2))
        )

    def test_only_pending_and_confirmed_bookings_block(self) -> None:
        booking = Booking.objects.create(
            guest=self.guest,
            property=self.property,
            check_in=self.day,
            check_out=self.day + timedelta(days=4),
            total_price=Decimal("480.00"),
            status=Booking.Status.CONFIRMED,
        )
        self.assertFalse(
            check_property_availability(self.property.pk, self.day + timedelta(days=3), self.day + timedelta(days=6))
        )
        self.assertTrue(
            check_property_availability(self.property.pk, self.day - timedelta(days=2), self.day)
        )

        booking.status = Booking.Status.CANCELLED
        booking.save(update_fields=["status"])
        self.assertTrue(
            check_property_availability(self.property.pk, self.day, self.day + timedelta(days=4))
        )

    def test_toggles_are_idempotent_and_keep_bookings(self) -> None:
        booking = Booking.objects.create(
            guest=self.guest,
            property=self.property,
            check_in=self.day,
            check_out=self.day + timedelta(days=1),
            total_price=Decimal("120.00"),
        )

        self.assertTrue(make_property_available(self.property.pk).available)
        self.assertTrue(make_property_available(self.property.pk).available)
        self.assertFalse(make_property_unavailable(self.property.pk).available)

        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_toggle_missing_property(self) -> None:
        with self.assertRaises(NotFound):
            make_property_available(424242)
