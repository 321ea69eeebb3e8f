"""Rating aggregator.

Keeps ``Property.avg_rating`` / ``Property.total_ratings`` equal to the
mean and count of the property's stored ratings. The rollup is always
recomputed from source under the property row lock and written with a
single UPDATE, never adjusted incrementally, so concurrent rating
writers cannot lose each other's contribution.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import structlog  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Count  # type: ignore

from apps.properties.models import Property
from apps.properties.services import lock_property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Conflict, Forbidden, InvalidInput, NotFound

from .events import RatingRollupRecomputed
from .models import MAX_RATING, MIN_RATING, REVIEW_MAX_LENGTH, REVIEW_MIN_LENGTH, Rating

logger = structlog.get_logger(__name__)

ONE_DECIMAL = Decimal("0.1")
ZERO_RATING = Decimal("0.0")


def round_rating(value: Decimal) -> Decimal:
    return value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def normalize_rating(value) -> Decimal:
    """Round to one decimal place (half up), then require 1 <= value <= 5."""
    if value is None or isinstance(value, bool):
        raise InvalidInput("Rating must be a number between 1 and 5.", code="invalid_rating")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput("Rating must be a number between 1 and 5.", code="invalid_rating")
    if not number.is_finite() or abs(number) > 2 * MAX_RATING:
        raise InvalidInput("Rating must be a number between 1 and 5.", code="invalid_rating")

    number = round_rating(number)
    if number < MIN_RATING or number > MAX_RATING:
        raise InvalidInput("Rating must be a number between 1 and 5.", code="invalid_rating")
    return number


def normalize_review(text) -> str:
    review = text.strip() if isinstance(text, str) else ""
    if not REVIEW_MIN_LENGTH <= len(review) <= REVIEW_MAX_LENGTH:
        raise InvalidInput(
            f"Review must be between {REVIEW_MIN_LENGTH} and {REVIEW_MAX_LENGTH} characters.",
            code="invalid_review",
        )
    return review


def compute_rollup(values) -> tuple[Decimal, int]:
    """Mean (rounded half up to 0.1) and count of ``values``; (0.0, 0) when empty."""
    values = list(values)
    total = len(values)
    if not total:
        return ZERO_RATING, 0
    return round_rating(sum(values, Decimal("0")) / total), total


def recompute_property_rollup(property_id) -> tuple[Decimal, int]:
    """Rewrite the rollup of ``property_id`` from its current ratings.

    Joins the caller's transaction when there is one, so the rating
    write and the rollup commit or roll back together.
    """

    with DjangoUnitOfWork() as uow:
        lock_property(property_id)
        avg_rating, total = compute_rollup(
            Rating.objects.filter(property_id=property_id).values_list("rating", flat=True)
        )
        Property.objects.filter(pk=property_id).update(avg_rating=avg_rating, total_ratings=total)

        uow.add_event(RatingRollupRecomputed(
            aggregate_id=property_id,
            property_id=property_id,
            avg_rating=avg_rating,
            total_ratings=total,
        ))

    logger.debug("rating_rollup_recomputed", property_id=property_id, avg_rating=str(avg_rating), total=total)
    return avg_rating, total


def _lock_rating(rating_id) -> Rating:
    """Lock the rating's property first, then the rating row."""
    property_id = Rating.objects.filter(pk=rating_id).values_list("property_id", flat=True).first()
    if property_id is None:
        raise NotFound("Rating not found.", code="rating_not_found")
    lock_property(property_id)
    try:
        return Rating.objects.select_for_update().get(pk=rating_id)
    except Rating.DoesNotExist:
        raise NotFound("Rating not found.", code="rating_not_found")


def create_rating(property_id, user_id, rating, review) -> Rating:
    value = normalize_rating(rating)
    text = normalize_review(review)

    with DjangoUnitOfWork():
        property_obj = lock_property(property_id)

        User = get_user_model()
        if not User.objects.filter(pk=user_id).exists():
            raise NotFound("User not found.", code="user_not_found")

        if Rating.objects.filter(property=property_obj, user_id=user_id).exists():
            raise Conflict("You have already rated this property.", code="duplicate_rating")

        try:
            with transaction.atomic():
                instance = Rating.objects.create(
                    property=property_obj,
                    user_id=user_id,
                    rating=value,
                    review=text,
                )
        except IntegrityError:
            raise Conflict("You have already rated this property.", code="duplicate_rating")

        recompute_property_rollup(property_obj.pk)

    logger.info("rating_created", rating_id=instance.pk, property_id=property_obj.pk, user_id=user_id)
    return instance


def update_rating(rating_id, rating=None, review=None) -> Rating:
    value = normalize_rating(rating) if rating is not None else None
    text = normalize_review(review) if review is not None else None

    with DjangoUnitOfWork():
        instance = _lock_rating(rating_id)
        update_fields = []
        if value is not None:
            instance.rating = value
            update_fields.append("rating")
        if text is not None:
            instance.review = text
            update_fields.append("review")
        if not update_fields:
            return instance

        instance.save(update_fields=update_fields + ["updated_at"])
        if "rating" in update_fields:
            recompute_property_rollup(instance.property_id)

    logger.info("rating_updated", rating_id=instance.pk, fields=update_fields)
    return instance


def delete_rating(rating_id) -> None:
    with DjangoUnitOfWork():
        instance = _lock_rating(rating_id)
        property_id = instance.property_id
        instance.delete()
        recompute_property_rollup(property_id)

    logger.info("rating_deleted", rating_id=rating_id, property_id=property_id)


def toggle_helpful(rating_id, user_id) -> tuple[bool, int]:
    """Flip ``user_id``'s membership in the helpful set.

    Returns the new membership and the number of helpful votes.
    """

    with DjangoUnitOfWork():
        try:
            instance = Rating.objects.select_for_update().get(pk=rating_id)
        except (Rating.DoesNotExist, ValueError, TypeError):
            raise NotFound("Rating not found.", code="rating_not_found")

        if instance.user_id == user_id:
            raise Forbidden("You cannot mark your own rating as helpful.", code="self_helpful")

        User = get_user_model()
        if not User.objects.filter(pk=user_id).exists():
            raise NotFound("User not found.", code="user_not_found")

        if instance.helpful.filter(pk=user_id).exists():
            instance.helpful.remove(user_id)
            is_helpful = False
        else:
            instance.helpful.add(user_id)
            is_helpful = True
        count = instance.helpful.count()

    logger.info("rating_helpful_toggled", rating_id=instance.pk, user_id=user_id, helpful=is_helpful)
    return is_helpful, count


def list_property_ratings(property_id):
    """Ratings of a property, newest first, with their helpful counts."""
    return (
        Rating.objects.filter(property_id=property_id)
        .select_related("user")
        .annotate(helpful_count=Count("helpful"))
        .order_by("-created_at", "-id")
    )
