"""Concurrent admission tests.

Writers are released together from several threads. PostgreSQL queues
them on the property row lock; SQLite queues them on the database write
lock taken at BEGIN IMMEDIATE.
"""

from __future__ import annotations

import threading
from datetime import date, timedelta
from decimal import Decimal

from django.db import connection, connections
from django.test import TransactionTestCase

from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.ratings.services import create_rating
from apps.users.models import User
from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError


def run_concurrently(*callables):
    """Run ``callables`` in threads released together; returns results or raised errors."""
    barrier = threading.Barrier(len(callables))
    results: list[object] = [None] * len(callables)

    def worker(index, fn):
        try:
            barrier.wait()
            results[index] = fn()
        except DomainError as exc:
            results[index] = exc
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(callables)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


class ConcurrentBookingTests(TransactionTestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="host@example.com", password="HostPass123")
        self.guests = [
            User.objects.create_user(email=f"guest{i}@example.com", password="GuestPass123")
            for i in range(4)
        ]
        self.property = Property.objects.create(
            owner=self.owner,
            title="Popular flat",
            street="Main st, 1",
            city="Almaty",
            country="Kazakhstan",
            price_per_night=Decimal("90.00"),
            max_guests=2,
            available=True,
        )
        self.day = date(2030, 9, 1)

    def _booker(self, guest, offset: int):
        def book():
            return message_bus.handle_command(
                CreateBookingCommand(
                    property_id=self.property.pk,
                    guest_id=guest.pk,
                    check_in=self.day + timedelta(days=offset),
                    check_out=self.day + timedelta(days=offset + 3),
                )
            )
        return book

    def test_only_one_of_overlapping_requests_is_admitted(self) -> None:
        results = run_concurrently(*(self._booker(guest, i) for i, guest in enumerate(self.guests[:2])))

        admitted = [r for r in results if isinstance(r, Booking)]
        rejected = [r for r in results if isinstance(r, DomainError)]
        self.assertEqual(len(admitted), 1)
        self.assertEqual(len(rejected), 1)
        self.assertEqual(rejected[0].code, "dates_conflict")
        self.assertEqual(
            Booking.objects.filter(property=self.property, status__in=Booking.BLOCKING_STATUSES).count(),
            1,
        )

    def test_disjoint_requests_are_all_admitted(self) -> None:
        results = run_concurrently(*(self._booker(guest, i * 3) for i, guest in enumerate(self.guests)))

        self.assertTrue(all(isinstance(r, Booking) for r in results), results)
        self.assertEqual(Booking.objects.filter(property=self.property).count(), 4)

    def test_concurrent_ratings_keep_rollup_exact(self) -> None:
        scores = ["5", "4", "3", "2"]
        results = run_concurrently(*(
            (lambda guest=guest, score=score: create_rating(
                self.property.pk, guest.pk, score, "Stayed here and liked it."
            ))
            for guest, score in zip(self.guests, scores)
        ))

        self.assertFalse([r for r in results if isinstance(r, DomainError)])
        self.property.refresh_from_db()
        self.assertEqual(self.property.total_ratings, 4)
        self.assertEqual(self.property.avg_rating, Decimal("3.5"))

    def test_sqlite_transactions_take_the_write_lock_up_front(self) -> None:
        if connection.vendor != "sqlite":
            self.skipTest("row locks serialize writers on this backend")
        options = connection.settings_dict["OPTIONS"]
        self.assertEqual(options["transaction_mode"], "IMMEDIATE")
        self.assertGreater(options["timeout"], 0)
