"""API views for the booking domain.

Reads go through the ORM; every write is turned into a command and
dispatched through the message bus to the booking command handlers.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import is_platform_admin
from shared.application.message_bus import message_bus

from .application.command_handlers import (
    ChangeBookingStatusCommand,
    CreateBookingCommand,
    DeleteBookingCommand,
    UpdateBookingCommand,
)
from .filters import BookingFilterSet
from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingUpdateSerializer


def _is_host(user, booking: Booking) -> bool:
    return booking.property.is_owned_by(user)


class IsBookingStakeholder(permissions.BasePermission):
    """Guests, property owners and administrators have access to a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        return obj.is_participant(user)


class BookingViewSet(viewsets.ModelViewSet):
    """Viewset for creating and managing bookings."""

    queryset = Booking.objects.select_related("property", "guest", "conversation").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["check_in", "created_at", "total_price"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "partial_update":
            return BookingUpdateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if is_platform_admin(user):
            return qs
        return qs.filter(guest=user) | qs.filter(property__owner=user)

    def _respond(self, booking: Booking, status_code=status.HTTP_200_OK) -> Response:
        booking = self.get_queryset().get(pk=booking.pk)
        data = BookingSerializer(booking, context=self.get_serializer_context()).data
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = message_bus.handle_command(
            CreateBookingCommand(
                property_id=data["property"],
                guest_id=request.user.pk,
                check_in=data["check_in"],
                check_out=data["check_out"],
                number_of_guests=data["number_of_guests"],
            )
        )
        return self._respond(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("status") == Booking.Status.CONFIRMED and not (
            is_platform_admin(request.user) or _is_host(request.user, booking)
        ):
            raise PermissionDenied("Only the property owner can confirm a booking.")

        booking = message_bus.handle_command(
            UpdateBookingCommand(
                booking_id=booking.pk,
                check_in=data.get("check_in"),
                check_out=data.get("check_out"),
                number_of_guests=data.get("number_of_guests"),
                status=data.get("status"),
                property_id=data.get("property"),
                guest_id=data.get("guest"),
            )
        )
        return self._respond(booking)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        if not is_platform_admin(request.user):
            raise PermissionDenied("Only administrators can delete bookings.")
        message_bus.handle_command(DeleteBookingCommand(booking_id=booking.pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if not (is_platform_admin(request.user) or _is_host(request.user, booking)):
            raise PermissionDenied("Only the property owner can confirm a booking.")
        booking = message_bus.handle_command(
            ChangeBookingStatusCommand(booking_id=booking.pk, status=Booking.Status.CONFIRMED)
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        booking = message_bus.handle_command(
            ChangeBookingStatusCommand(booking_id=booking.pk, status=Booking.Status.CANCELLED)
        )
        return self._respond(booking)
