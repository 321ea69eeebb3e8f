import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("stayhub")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Audit confirmed/pending bookings for calendar overlaps, every 10 minutes
    "detect-overlapping-bookings": {
        "task": "bookings.detect_overlapping_bookings",
        "schedule": crontab(minute="*/10"),
        "options": {"expires": 540},
    },
    # Rebuild property rating rollups from source ratings, nightly
    "reconcile-rating-rollups": {
        "task": "ratings.reconcile_rating_rollups",
        "schedule": crontab(minute=30, hour=3),
    },
}

app.conf.timezone = "UTC"
