"""Subscribers for chat events: audit log lines."""

import structlog

from .events import ConversationRead, MessagePosted

logger = structlog.get_logger("apps.chat.audit")


def log_message_posted(event: MessagePosted) -> None:
    logger.info(
        "audit.message_posted",
        **event.to_dict(),
        booking_id=event.booking_id,
        message_id=event.message_id,
    )


def log_conversation_read(event: ConversationRead) -> None:
    logger.info(
        "audit.conversation_read",
        **event.to_dict(),
        reader_id=event.reader_id,
        marked=event.marked,
    )


def register_handlers(bus) -> None:
    bus.register_event_handler(MessagePosted, log_message_posted)
    bus.register_event_handler(ConversationRead, log_conversation_read)
