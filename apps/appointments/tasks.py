"""Celery tasks for appointments."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .application.command_handlers import mark_completed
from .domain.events import AppointmentCompleted
from .models import Appointment

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="appointments.complete_finished_appointments")
def complete_finished_appointments() -> dict[str, int]:
    """
    Mark past-due CONFIRMED/CHECKED_IN appointments COMPLETED.

    Runs every 15 minutes through Celery Beat.
    """
    now = timezone.now()
    due = Appointment.objects.filter(
        status__in=Appointment.ACTIVE_STATUSES,
        end_time__lte=now,
    ).values_list("pk", flat=True)

    completed = 0
    for appointment_id in list(due):
        with DjangoUnitOfWork() as uow:
            appointment = (
                Appointment.objects.select_for_update()
                .filter(pk=appointment_id, status__in=Appointment.ACTIVE_STATUSES)
                .first()
            )
            if appointment is None:
                continue
            mark_completed(appointment)
            uow.add_event(AppointmentCompleted(
                aggregate_id=appointment.pk,
                appointment_id=appointment.pk,
                patient_id=appointment.patient_id,
                doctor_id=appointment.doctor_id,
            ))
        completed += 1

    if completed:
        logger.info(f"Auto-completed {completed} appointments")
    return {"completed": completed}
