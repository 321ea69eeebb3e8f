"""API views for managing ratings."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import is_platform_admin

from .models import Rating
from .serializers import RatingCreateSerializer, RatingSerializer, RatingUpdateSerializer
from .services import create_rating, delete_rating, toggle_helpful, update_rating


class IsRaterOrAdmin(permissions.BasePermission):
    """Allow users to manage their own ratings and admins to manage all."""

    def has_object_permission(self, request, view, obj: Rating) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS or view.action == 'helpful':
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        return obj.user_id == user.id


class RatingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Ratings: reads through the ORM, writes through the rating aggregator."""

    queryset = Rating.objects.select_related('user').all()
    serializer_class = RatingSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsRaterOrAdmin]
    filterset_fields = ['property', 'user']
    lookup_value_regex = r'\d+'

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = RatingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rating = create_rating(
            serializer.validated_data['property'],
            request.user.pk,
            serializer.validated_data['rating'],
            serializer.validated_data['review'],
        )
        return Response(RatingSerializer(rating).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        instance = self.get_object()
        serializer = RatingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rating = update_rating(
            instance.pk,
            rating=serializer.validated_data.get('rating'),
            review=serializer.validated_data.get('review'),
        )
        return Response(RatingSerializer(rating).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        instance = self.get_object()
        delete_rating(instance.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], permission_classes=[permissions.IsAuthenticated, IsRaterOrAdmin])
    def helpful(self, request, pk=None):  # type: ignore
        instance = self.get_object()
        is_helpful, count = toggle_helpful(instance.pk, request.user.pk)
        return Response({'helpful': is_helpful, 'helpful_count': count})
