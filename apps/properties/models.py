"""Property domain models for StayHub.

A property is the parent aggregate of the booking calendar and of the
rating rollup. Booking operations never mutate it; the rollup fields
(`avg_rating`, `total_ratings`) are only written by the rating
aggregator.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """Listing offered for short-stay rental."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20, blank=True)

    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    max_guests = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    available = models.BooleanField(
        default=False,
        help_text=_("Only available properties accept new bookings."),
    )

    avg_rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal("0.0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("5"))],
        editable=False,
    )
    total_ratings = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["city", "available"], name="property_city_available_idx"),
            models.Index(fields=["owner", "available"], name="property_owner_available_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_night__gte=0),
                name="property_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(max_guests__gte=1),
                name="property_max_guests_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.city})"

    def is_owned_by(self, user) -> bool:
        return bool(user and user.is_authenticated and self.owner_id == user.pk)

    def accepts_guests(self, number_of_guests: int) -> bool:
        return 1 <= number_of_guests <= self.max_guests
