"""
Domain kernel

Aggregates are plain Django models. What the apps share is the notion of
an immutable value and of an event describing a committed change; the
unit of work collects events and hands them to the message bus once the
transaction is durable.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable value compared by its attributes; has no identity."""


@dataclass
class DomainEvent:
    """
    Something that happened to an aggregate

    ``aggregate_id`` is the primary key of the booking, conversation or
    property the event is about. Subclasses declare their payload as
    keyword-only dataclass fields.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: Any = None

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        """Envelope fields for log lines; the payload is logged by each subscriber."""
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': None if self.aggregate_id is None else str(self.aggregate_id),
        }
