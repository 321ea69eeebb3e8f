"""
Unit of Work

One read-check-write sequence of the engine: a booking admission, a
status change, a message append, a rollup recompute. The sequence runs
inside ``transaction.atomic()``; the events it produced are handed to the
message bus only when the outermost transaction has committed.
"""

from typing import List
import logging

from django.db import OperationalError, transaction

from shared.domain.base import DomainEvent
from shared.domain.exceptions import Unavailable

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = "Storage is temporarily unavailable, please retry."


class DjangoUnitOfWork:
    """
    Usage:
        with DjangoUnitOfWork() as uow:
            property_obj = lock_property(property_id)
            booking = Booking.objects.create(...)
            uow.add_event(BookingCreated(...))
        # BookingCreated is published once the transaction has committed

    Nested units of work become savepoints of the outer one, so a rating
    write and the rollup recompute it triggers commit or roll back
    together. A storage ``OperationalError`` inside the block or on
    commit surfaces as ``Unavailable`` after the rollback.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._schedule_publish()
        elif self._events:
            logger.warning(f"Rolling back, discarding {len(self._events)} events")
            self._events.clear()

        try:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
        except OperationalError as exc:
            logger.error(f"Commit failed, transaction rolled back: {exc}")
            raise Unavailable(STORAGE_UNAVAILABLE) from exc
        finally:
            self._atomic = None

        if exc_type is not None and issubclass(exc_type, OperationalError):
            logger.error(f"Storage error inside unit of work: {exc_val}")
            raise Unavailable(STORAGE_UNAVAILABLE) from exc_val
        return False

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _schedule_publish(self):
        if not self._events:
            return
        events, self._events = self._events, []
        transaction.on_commit(lambda: self._publish(events), using=self.using)

    @staticmethod
    def _publish(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.debug(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)
