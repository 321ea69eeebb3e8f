"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new pending booking was admitted

    The booking's conversation was created in the same transaction.
    """
    booking_id: int
    property_id: int
    guest_id: int
    check_in: date
    check_out: date
    total_price: Decimal


@dataclass(kw_only=True)
class BookingUpdated(DomainEvent):
    """
    Event: Dates, guest count or status of a booking changed

    ``changes`` maps each changed field to its ``(old, new)`` pair.
    """
    booking_id: int
    property_id: int
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: Booking moved through the status machine

    A move to ``cancelled`` releases the dates for other guests.
    """
    booking_id: int
    property_id: int
    old_status: str
    new_status: str


@dataclass(kw_only=True)
class BookingDeleted(DomainEvent):
    """Event: Booking was hard-deleted by an administrator"""
    booking_id: int
    property_id: int
