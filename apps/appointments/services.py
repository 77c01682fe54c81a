"""Doctor availability management and the appointment slot picker."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.scheduling.domain import availability as engine
from apps.scheduling.services import ResourceSchedule
from shared.domain.exceptions import DomainValidationError, PermissionDeniedError
from shared.domain.value_objects import Interval

from .models import Appointment, DoctorAvailability

logger = logging.getLogger(__name__)

schedule = ResourceSchedule(
    booking_model=Appointment,
    period_model=DoctorAvailability,
    resource_field="doctor",
    label="Doctor",
    step=engine.EXACT,
)


def slot_length() -> timedelta:
    return timedelta(minutes=getattr(settings, "APPOINTMENT_SLOT_MINUTES", 30))


@transaction.atomic
def create_availability(doctor, start: datetime, end: datetime, reason: str = "") -> DoctorAvailability:
    if not doctor.is_doctor():
        raise PermissionDeniedError("Only doctors can publish availability.")
    interval = Interval(start, end)
    schedule.ensure_period_does_not_overlap(doctor, interval)
    period = DoctorAvailability.objects.create(doctor=doctor, start=start, end=end, reason=reason)
    logger.info(f"Doctor {doctor.pk} published availability {interval}")
    return period


@transaction.atomic
def update_availability(period: DoctorAvailability, **changes) -> DoctorAvailability:
    start = changes.get("start", period.start)
    end = changes.get("end", period.end)
    is_active = changes.get("is_active", period.is_active)
    interval = Interval(start, end)
    if is_active:
        schedule.ensure_period_does_not_overlap(period.doctor, interval, exclude_id=period.pk)

    period.start = start
    period.end = end
    period.is_active = is_active
    period.reason = changes.get("reason", period.reason)
    period.save(update_fields=["start", "end", "is_active", "reason", "updated_at"])
    return period


def available_slots(doctor, days: int = 7, *, now: Optional[datetime] = None) -> Optional[List[Interval]]:
    """Bookable slots of ``doctor`` starting within the next ``days`` days.

    Returns ``None`` when the doctor has no active period and can therefore be
    booked at any time. An empty list means every period is taken.
    """

    if days < 1:
        raise DomainValidationError("days must be at least 1.")
    now = now or timezone.now()
    horizon = now + timedelta(days=days)

    ranges = schedule.free_ranges(doctor, since=now)
    if ranges is None:
        return None
    if not ranges:
        return []

    clipped = []
    for free in ranges:
        end = min(free.end, horizon)
        if free.start < end:
            clipped.append(Interval(free.start, end))
    return engine.split_into_slots(clipped, slot_length(), not_before=now)
