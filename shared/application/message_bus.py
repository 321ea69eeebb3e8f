"""
Message Bus

Views turn write requests into command objects and hand them to the bus,
which calls the one handler registered for the command's type. Domain
events go the other way: the unit of work publishes them after commit
and every subscriber of the event's type (or of one of its base classes)
receives them.
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent
from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class MessageBus:
    """
    Commands: exactly one handler per command type.
    Events: any number of subscribers per event type.
    """

    def __init__(self):
        self._command_handlers: Dict[Type, Callable[[Any], Any]] = {}
        self._subscribers: Dict[Type[DomainEvent], List[Callable[[DomainEvent], None]]] = {}

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        """
        Bind ``handler`` to ``command_type``

        AppConfig.ready() may run more than once, so binding the same
        handler again is accepted; binding a different one is an error.
        """
        current = self._command_handlers.get(command_type)
        if current is not None and current != handler:
            raise ValueError(
                f"{command_type.__name__} is already handled by {_handler_name(current)}"
            )
        self._command_handlers[command_type] = handler

    def register_event_handler(self, event_type: Type[DomainEvent], handler: Callable[[DomainEvent], None]):
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler of ``command`` and return its result

        Domain errors are expected outcomes (a taken date range, a missing
        guest) and propagate to the caller unchanged.
        """
        command_name = type(command).__name__
        try:
            handler = self._command_handlers[type(command)]
        except KeyError:
            raise LookupError(f"No handler registered for command {command_name}") from None

        logger.debug(f"Handling {command_name}")
        try:
            return handler(command)
        except DomainError as e:
            logger.info(f"{command_name} rejected: {e.code}")
            raise
        except Exception:
            logger.exception(f"{command_name} failed")
            raise

    def subscribers_for(self, event: DomainEvent) -> List[Callable[[DomainEvent], None]]:
        found: List[Callable[[DomainEvent], None]] = []
        for event_type in type(event).__mro__:
            for handler in self._subscribers.get(event_type, ()):
                if handler not in found:
                    found.append(handler)
        return found

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Deliver ``events`` to their subscribers

        The state the events describe is already committed, so a failing
        subscriber is logged and the remaining ones still run.
        """
        for event in events:
            for handler in self.subscribers_for(event):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"Subscriber {_handler_name(handler)} failed on "
                        f"{event.event_type} {event.event_id}"
                    )


# Process-wide bus; the apps wire their handlers in AppConfig.ready()
message_bus = MessageBus()
