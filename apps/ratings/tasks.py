"""Celery tasks for the rating domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.properties.models import Property
from shared.domain.exceptions import NotFound

from .models import Rating
from .services import compute_rollup, recompute_property_rollup

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="ratings.reconcile_rating_rollups")
def reconcile_rating_rollups() -> dict[str, object]:
    """
    Rebuild property rating rollups that drifted from their ratings.

    Writes that bypass the rating services (admin edits, raw SQL) can
    leave ``avg_rating`` / ``total_ratings`` stale. Every property is
    compared against its stored ratings and the drifted ones are
    recomputed under the property lock.

    Runs nightly via Celery Beat.

    Returns:
        dict: {"checked": properties inspected, "repaired": ids rewritten}
    """
    ratings_by_property: dict[int, list] = {}
    for property_id, value in Rating.objects.values_list("property_id", "rating"):
        ratings_by_property.setdefault(property_id, []).append(value)

    checked = 0
    repaired: list[int] = []
    rollups = list(Property.objects.values_list("pk", "avg_rating", "total_ratings"))
    for property_id, avg_rating, total in rollups:
        checked += 1
        expected = compute_rollup(ratings_by_property.get(property_id, []))
        if (avg_rating, total) == expected:
            continue
        try:
            recompute_property_rollup(property_id)
        except NotFound:
            # Deleted since the scan started
            continue
        repaired.append(property_id)
        logger.warning(
            f"Rating rollup of property {property_id} drifted: "
            f"stored ({avg_rating}, {total}), expected {expected}"
        )

    logger.info(f"Rating rollups checked: {checked}, repaired: {len(repaired)}")
    return {"checked": checked, "repaired": repaired}
