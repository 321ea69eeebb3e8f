"""Models for the rating domain.

Defines the ``Rating`` entity: a score from 1 to 5 with one decimal
place and a written review, left by a user for a property. The users
who found a rating helpful are kept as a many-to-many set.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MIN_RATING = Decimal("1")
MAX_RATING = Decimal("5")
REVIEW_MIN_LENGTH = 10
REVIEW_MAX_LENGTH = 1000


class Rating(models.Model):
    """A user's rating of a property."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ratings'
    )
    property = models.ForeignKey(
        'properties.Property', on_delete=models.CASCADE, related_name='ratings'
    )
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)],
        help_text=_('Score from 1.0 to 5.0'),
    )
    review = models.CharField(max_length=REVIEW_MAX_LENGTH)
    helpful = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='helpful_ratings',
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Rating')
        verbose_name_plural = _('Ratings')
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['property', 'user'], name='rating_unique_user_property'),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name='rating_value_range',
            ),
        ]
        indexes = [
            models.Index(fields=['property', '-created_at'], name='rating_property_recent_idx'),
        ]

    def __str__(self) -> str:
        return f"Rating by {self.user_id} for property {self.property_id} ({self.rating})"
