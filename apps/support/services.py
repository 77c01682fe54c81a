"""Patient support messages: intake, admin triage and statistics."""

from __future__ import annotations

import logging
from typing import Any, Optional

from django.db.models import Case, Count, IntegerField, Q, Value, When  # type: ignore
from django.utils import timezone  # type: ignore

from apps.scheduling.services import lock_queryset_if_possible
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError

from .domain.events import PatientMessageAnswered
from .models import PatientMessage

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    PatientMessage.Priority.URGENT: 3,
    PatientMessage.Priority.HIGH: 2,
    PatientMessage.Priority.NORMAL: 1,
    PatientMessage.Priority.LOW: 0,
}


def message_number_for(pk: int) -> str:
    return f"MSG-{pk:06d}"


def create_message(
    patient,
    subject: str,
    message: str,
    message_type: str = PatientMessage.MessageType.GENERAL,
    priority: str = PatientMessage.Priority.NORMAL,
) -> PatientMessage:
    if not patient.is_patient():
        raise PermissionDeniedError("Only patients can create messages.")
    if not subject.strip() or not message.strip():
        raise DomainValidationError("Subject and message are required.")

    with DjangoUnitOfWork():
        row = PatientMessage.objects.create(
            patient=patient,
            subject=subject,
            message=message,
            message_type=message_type,
            priority=priority,
        )
        row.message_number = message_number_for(row.pk)
        row.save(update_fields=["message_number"])

    logger.info(f"Patient message {row.message_number} created by user {patient.pk}")
    return row


def triage_queue(queryset=None):
    """Messages ordered for the admin console: most urgent first, then newest."""
    queryset = PatientMessage.objects.all() if queryset is None else queryset
    rank = Case(
        *[When(priority=priority, then=Value(value)) for priority, value in PRIORITY_RANK.items()],
        default=Value(0),
        output_field=IntegerField(),
    )
    return queryset.annotate(priority_rank=rank).order_by("-priority_rank", "-created_at")


def update_message(
    message_id: int,
    admin,
    *,
    status: Optional[str] = None,
    admin_response: str = "",
) -> PatientMessage:
    """
    Change a message's status and/or record the admin's answer.

    Answering a PENDING message without an explicit status moves it to
    RESPONDED.
    """
    if not status and not admin_response:
        raise DomainValidationError("Provide a status or a response.")
    if status and status not in PatientMessage.Status.values:
        raise DomainValidationError(f"Unknown message status {status}.")

    with DjangoUnitOfWork() as uow:
        try:
            row = lock_queryset_if_possible(PatientMessage.objects.filter(pk=message_id)).get()
        except PatientMessage.DoesNotExist as exc:
            raise NotFoundError("Message not found.") from exc

        if status:
            row.status = status
        if admin_response:
            row.admin_response = admin_response
            row.responded_by = admin
            row.responded_at = timezone.now()
            if not status and row.status == PatientMessage.Status.PENDING:
                row.status = PatientMessage.Status.RESPONDED
            uow.add_event(PatientMessageAnswered(
                aggregate_id=row.pk,
                message_id=row.pk,
                message_number=row.message_number or "",
                patient_id=row.patient_id,
                subject=row.subject,
            ))
        row.save()

    logger.info(f"Patient message {row.message_number} updated by {admin.pk}: {row.status}")
    return row


def message_statistics() -> dict[str, Any]:
    return PatientMessage.objects.aggregate(
        total_messages=Count("id"),
        pending_messages=Count("id", filter=Q(status=PatientMessage.Status.PENDING)),
        urgent_messages=Count("id", filter=Q(priority=PatientMessage.Priority.URGENT)),
        prescription_messages=Count("id", filter=Q(message_type=PatientMessage.MessageType.PRESCRIPTION)),
    )
