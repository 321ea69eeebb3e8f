"""Booking domain models for StayHub."""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Booking(models.Model):
    """Reservation of a property for ``[check_in, check_out)``."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    # Statuses that occupy the calendar
    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)

    ALLOWED_TRANSITIONS = {
        Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED}),
        Status.CONFIRMED: frozenset({Status.CONFIRMED, Status.CANCELLED}),
        Status.CANCELLED: frozenset(),
    }

    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    number_of_guests = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Nightly rate times nights, recomputed on every date change."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gte=0),
                name="booking_total_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(number_of_guests__gte=1),
                name="booking_number_of_guests_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "status", "check_in", "check_out"], name="booking_calendar_idx"),
            models.Index(fields=["guest", "status"], name="booking_guest_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for {self.property_id} ({self.check_in} - {self.check_out})"

    @builtins.property
    def dates(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @builtins.property
    def nights(self) -> int:
        return self.dates.nights

    @builtins.property
    def blocks_calendar(self) -> bool:
        return self.status in self.BLOCKING_STATUSES

    def can_transition_to(self, status: str) -> bool:
        return status in self.ALLOWED_TRANSITIONS.get(self.status, frozenset())

    def is_participant(self, user) -> bool:
        """Guest of the booking or owner of the booked property."""
        if user is None or not user.is_authenticated:
            return False
        return user.pk in (self.guest_id, self.property.owner_id)
