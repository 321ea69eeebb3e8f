"""Conversation thread services.

The conversation is a sub-aggregate of its booking: it is opened in the
booking's creation transaction and removed with it. Appends and read
marks lock the conversation row so that concurrent writers on one
thread apply one after another.
"""

from __future__ import annotations

import structlog  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Forbidden, InvalidInput, NotFound

from .events import ConversationRead, MessagePosted
from .models import Conversation, Message

logger = structlog.get_logger(__name__)


def open_conversation(booking) -> Conversation:
    """Create the empty, active thread of a freshly admitted booking."""
    return Conversation.objects.create(booking=booking, active=True)


def close_conversation(booking) -> None:
    Conversation.objects.filter(booking=booking, active=True).update(active=False)


def _get_conversation(conversation_id, *, lock: bool = False) -> Conversation:
    qs = Conversation.objects.select_related("booking__property")
    if lock:
        qs = qs.select_for_update(of=("self",))
    try:
        return qs.get(pk=conversation_id)
    except (Conversation.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Conversation not found.", code="conversation_not_found")


def _ensure_participant(conversation: Conversation, user_id) -> None:
    if user_id not in conversation.participant_ids():
        raise Forbidden(
            "Only the guest and the property owner take part in this conversation.",
            code="not_a_participant",
        )


def find_booking_by_conversation(conversation_id):
    """Return the booking that owns ``conversation_id``."""
    return _get_conversation(conversation_id).booking


def append_message(conversation_id, sender_id, recipient_id, content: str) -> Message:
    """Append a message from ``sender_id`` to ``recipient_id``.

    The sender must be the guest or the owner and the recipient the other
    one of the two. New messages start unread.
    """

    User = get_user_model()

    with DjangoUnitOfWork() as uow:
        conversation = _get_conversation(conversation_id, lock=True)

        found = set(User.objects.filter(pk__in=[sender_id, recipient_id]).values_list("pk", flat=True))
        if sender_id not in found or recipient_id not in found:
            raise NotFound("User not found.", code="user_not_found")

        _ensure_participant(conversation, sender_id)
        if recipient_id != conversation.counterpart_id(sender_id):
            raise InvalidInput(
                "Messages can only be sent to the other party of the booking.",
                code="invalid_recipient",
            )

        if not content or not content.strip():
            raise InvalidInput("Message content cannot be empty.", code="empty_message")

        message = Message.objects.create(
            conversation=conversation,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            is_read=False,
        )
        Conversation.objects.filter(pk=conversation.pk).update(updated_at=message.sent_at)

        uow.add_event(MessagePosted(
            aggregate_id=conversation.booking_id,
            conversation_id=str(conversation.pk),
            booking_id=conversation.booking_id,
            message_id=message.pk,
            sender_id=sender_id,
            recipient_id=recipient_id,
        ))

    logger.info(
        "message_posted",
        conversation_id=str(conversation.pk),
        message_id=message.pk,
        sender_id=sender_id,
    )
    return message


def mark_conversation_read(conversation_id, acting_user_id) -> int:
    """Mark every message of the thread as read.

    Only the guest or the owner may do it. Returns how many messages
    flipped; a second call returns 0.
    """

    with DjangoUnitOfWork() as uow:
        conversation = _get_conversation(conversation_id, lock=True)
        _ensure_participant(conversation, acting_user_id)

        marked = conversation.messages.filter(is_read=False).update(is_read=True)
        if marked:
            uow.add_event(ConversationRead(
                aggregate_id=conversation.booking_id,
                conversation_id=str(conversation.pk),
                reader_id=acting_user_id,
                marked=marked,
            ))

    logger.info("conversation_read", conversation_id=str(conversation.pk), marked=marked)
    return marked


def list_messages(conversation_id, acting_user_id=None):
    """Messages of the thread in insertion order."""
    conversation = _get_conversation(conversation_id)
    if acting_user_id is not None:
        _ensure_participant(conversation, acting_user_id)
    return conversation.messages.select_related("sender", "recipient").order_by("id")
