"""Subscribers for rating events: audit log lines."""

import structlog

from .events import RatingRollupRecomputed

logger = structlog.get_logger("apps.ratings.audit")


def log_rollup_recomputed(event: RatingRollupRecomputed) -> None:
    logger.info(
        "audit.rating_rollup_recomputed",
        **event.to_dict(),
        avg_rating=str(event.avg_rating),
        total_ratings=event.total_ratings,
    )


def register_handlers(bus) -> None:
    bus.register_event_handler(RatingRollupRecomputed, log_rollup_recomputed)
