"""Celery tasks for cabin bookings."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import CabinBooking

logger = logging.getLogger(__name__)


@shared_task(name="cabins.complete_finished_cabin_bookings")
def complete_finished_cabin_bookings() -> dict[str, int]:
    """Mark active bookings whose check-out date has passed COMPLETED. Runs daily."""

    today = timezone.localdate()
    completed = CabinBooking.objects.filter(
        status__in=CabinBooking.ACTIVE_STATUSES,
        check_out_date__lt=today,
    ).update(status=CabinBooking.Status.COMPLETED, completed_at=timezone.now(), updated_at=timezone.now())
    if completed:
        logger.info(f"Auto-completed {completed} cabin bookings")
    return {"completed": completed}
