"""Tests for stay pricing and the overlap sweep."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

from django.test import SimpleTestCase

from apps.bookings.models import Booking
from apps.bookings.services import calculate_total_price, count_nights
from apps.bookings.tasks import find_overlapping_pairs
from shared.domain.value_objects import DateRange


class PricingTests(SimpleTestCase):
    def test_price_is_rate_times_nights(self) -> None:
        self.assertEqual(
            calculate_total_price(Decimal("100.00"), date(2030, 1, 1), date(2030, 1, 4)),
            Decimal("300.00"),
        )

    def test_single_night(self) -> None:
        self.assertEqual(
            calculate_total_price(Decimal("79.99"), date(2030, 1, 1), date(2030, 1, 2)),
            Decimal("79.99"),
        )

    def test_free_property(self) -> None:
        self.assertEqual(
            calculate_total_price(Decimal("0"), date(2030, 1, 1), date(2030, 1, 8)),
            Decimal("0"),
        )

    def test_nights_across_month_boundary(self) -> None:
        self.assertEqual(count_nights(date(2030, 1, 30), date(2030, 2, 2)), 3)

    def test_no_rounding_is_applied(self) -> None:
        self.assertEqual(
            calculate_total_price(Decimal("33.33"), date(2030, 3, 1), date(2030, 3, 4)),
            Decimal("99.99"),
        )


class DateRangeTests(SimpleTestCase):
    def test_back_to_back_ranges_do_not_overlap(self) -> None:
        first = DateRange(date(2030, 1, 1), date(2030, 1, 5))
        second = DateRange(date(2030, 1, 5), date(2030, 1, 8))
        self.assertFalse(first.overlaps_with(second))
        self.assertFalse(second.overlaps_with(first))

    def test_nested_range_overlaps(self) -> None:
        outer = DateRange(date(2030, 1, 1), date(2030, 1, 10))
        inner = DateRange(date(2030, 1, 3), date(2030, 1, 4))
        self.assertTrue(outer.overlaps_with(inner))
        self.assertTrue(inner.overlaps_with(outer))

    def test_empty_range_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DateRange(date(2030, 1, 1), date(2030, 1, 1))

    def test_check_out_day_is_not_a_night(self) -> None:
        stay = DateRange(date(2030, 1, 1), date(2030, 1, 3))
        self.assertEqual(stay.nights, 2)
        self.assertEqual(str(stay), "2030-01-01..2030-01-03")


class OverlapSweepTests(SimpleTestCase):
    def _booking(self, pk: int, check_in: date, nights: int, created_minute: int) -> Booking:
        return Booking(
            pk=pk,
            property_id=1,
            check_in=check_in,
            check_out=check_in + timedelta(days=nights),
            created_at=datetime(2030, 1, 1, 12, created_minute),
        )

    def test_pairs_are_ordered_by_creation(self) -> None:
        later = self._booking(1, date(2030, 5, 1), 3, created_minute=30)
        earlier = self._booking(2, date(2030, 5, 2), 3, created_minute=10)

        pairs = find_overlapping_pairs([later, earlier])

        self.assertEqual([(a.pk, b.pk) for a, b in pairs], [(2, 1)])

    def test_adjacent_bookings_are_not_paired(self) -> None:
        first = self._booking(1, date(2030, 5, 1), 2, created_minute=1)
        second = self._booking(2, date(2030, 5, 3), 2, created_minute=2)
        self.assertEqual(find_overlapping_pairs([first, second]), [])

    def test_long_stay_overlaps_every_short_one(self) -> None:
        long_stay = self._booking(1, date(2030, 5, 1), 10, created_minute=1)
        short_a = self._booking(2, date(2030, 5, 2), 1, created_minute=2)
        short_b = self._booking(3, date(2030, 5, 6), 1, created_minute=3)

        pairs = find_overlapping_pairs([long_stay, short_a, short_b])

        self.assertEqual([(a.pk, b.pk) for a, b in pairs], [(1, 2), (1, 3)])
