"""Property API views."""

from __future__ import annotations

from django.utils.dateparse import parse_date  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.ratings.serializers import RatingSerializer
from apps.ratings.services import list_property_ratings
from apps.users.permissions import is_platform_admin

from .filters import PropertyFilterSet
from .models import Property
from .serializers import PropertySerializer, PropertyWriteSerializer
from .services import (
    check_property_availability,
    get_property,
    make_property_available,
    make_property_unavailable,
)


def _query_date(request, name: str):
    raw = request.query_params.get(name)
    if not raw:
        return None
    try:
        return parse_date(raw)
    except ValueError:
        return None


class IsPropertyOwnerOrAdmin(permissions.BasePermission):
    """Lets the owner and platform admins manage a property."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        if is_platform_admin(request.user):
            return True
        return obj.is_owned_by(request.user)


class PropertyViewSet(viewsets.ModelViewSet):
    """Viewset for property listings.

    Anonymous visitors and other users only see available properties;
    owners also see their own unpublished listings.
    """

    queryset = Property.objects.select_related("owner")
    permission_classes = [IsPropertyOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["price_per_night", "avg_rating", "created_at", "max_guests"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if is_platform_admin(user):
            return qs
        if user.is_authenticated:
            return qs.filter(available=True) | qs.filter(owner=user)
        return qs.filter(available=True)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def perform_create(self, serializer):  # type: ignore
        serializer.save(owner=self.request.user)

    @action(detail=True, methods=["post"], url_path="make-available")
    def make_available(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj = make_property_available(property_obj.pk)
        return Response(PropertySerializer(property_obj).data)

    @action(detail=True, methods=["post"], url_path="make-unavailable")
    def make_unavailable(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        property_obj = make_property_unavailable(property_obj.pk)
        return Response(PropertySerializer(property_obj).data)

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def availability(self, request, pk=None):  # type: ignore
        """Is the property free for ``?check_in=YYYY-MM-DD&check_out=YYYY-MM-DD``."""
        check_in = _query_date(request, "check_in")
        check_out = _query_date(request, "check_out")
        is_free = check_property_availability(pk, check_in, check_out)
        return Response(
            {
                "property_id": int(pk),
                "check_in": check_in,
                "check_out": check_out,
                "available": is_free,
            }
        )

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def ratings(self, request, pk=None):  # type: ignore
        property_obj = get_property(pk)
        ratings = list_property_ratings(property_obj.pk)
        page = self.paginate_queryset(ratings)
        if page is not None:
            serializer = RatingSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(serializer.data)
        serializer = RatingSerializer(ratings, many=True, context=self.get_serializer_context())
        return Response(serializer.data)
