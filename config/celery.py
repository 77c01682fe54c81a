import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("careline")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Close appointments whose end time has passed
    "complete-finished-appointments": {
        "task": "appointments.complete_finished_appointments",
        "schedule": crontab(minute="*/15"),
    },
    # Close cabin stays after check-out
    "complete-finished-cabin-bookings": {
        "task": "cabins.complete_finished_cabin_bookings",
        "schedule": crontab(minute=30, hour=0),
    },
    # Monthly plan credits
    "allocate-monthly-credits": {
        "task": "ledger.allocate_monthly_credits",
        "schedule": crontab(minute=0, hour=1, day_of_month=1),
    },
    # Cached balances versus ledger
    "reconcile-credit-balances": {
        "task": "ledger.reconcile_balances",
        "schedule": crontab(minute=0, hour=3),
    },
}

app.conf.timezone = "UTC"
