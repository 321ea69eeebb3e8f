"""Rating domain events."""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class RatingRollupRecomputed(DomainEvent):
    """Event: A property's average rating and count were rewritten"""
    property_id: int
    avg_rating: Decimal
    total_ratings: int
