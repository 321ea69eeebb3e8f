"""Conversation API views."""

from __future__ import annotations

from rest_framework import generics, permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .serializers import MessageCreateSerializer, MessageSerializer
from .services import (
    append_message,
    find_booking_by_conversation,
    list_messages,
    mark_conversation_read,
)


class ConversationMessagesView(generics.ListCreateAPIView):
    """List the thread in insertion order or append to it."""

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return list_messages(self.kwargs["conversation_id"], acting_user_id=self.request.user.pk)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation_id = self.kwargs["conversation_id"]
        recipient_id = serializer.validated_data.get("recipient_id")
        if recipient_id is None:
            booking = find_booking_by_conversation(conversation_id)
            owner_id = booking.property.owner_id
            recipient_id = owner_id if request.user.pk == booking.guest_id else booking.guest_id

        message = append_message(
            conversation_id,
            request.user.pk,
            recipient_id,
            serializer.validated_data["content"],
        )
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ConversationReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, conversation_id):  # type: ignore
        marked = mark_conversation_read(conversation_id, request.user.pk)
        return Response({"marked": marked}, status=status.HTTP_200_OK)
