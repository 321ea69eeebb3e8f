"""Chat domain events."""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class MessagePosted(DomainEvent):
    """Event: A message was appended to a booking conversation"""
    conversation_id: str
    booking_id: int
    message_id: int
    sender_id: int
    recipient_id: int


@dataclass(kw_only=True)
class ConversationRead(DomainEvent):
    """Event: A participant marked the whole conversation as read"""
    conversation_id: str
    reader_id: int
    marked: int
