"""
Appointment Command Handlers

The use cases of the appointments domain. Each handler runs inside one
``DjangoUnitOfWork``: the appointment row, both credit balances and the
ledger entries are written together or not at all, and domain events go
out only after commit.

Commands:
- BookAppointmentCommand: A patient books a doctor
- CancelAppointmentCommand: Patient or doctor cancels, credits go back
- CheckInAppointmentCommand: Doctor checks the patient in
- CompleteAppointmentCommand: Doctor completes a finished consultation
- AddNotesCommand: Doctor writes consultation notes
"""

from dataclasses import dataclass
from datetime import datetime
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.appointments.domain.events import (
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
)
from apps.appointments.models import Appointment
from apps.appointments.services import schedule
from apps.ledger.models import CreditTransaction
from apps.ledger.services import transfer
from apps.scheduling.services import lock_queryset_if_possible
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    DomainValidationError,
    NotFoundError,
    PermissionDeniedError,
)
from shared.domain.value_objects import Interval

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class BookAppointmentCommand:
    doctor_id: int
    start_time: datetime
    end_time: datetime
    requester: object
    description: str = ''


@dataclass
class CancelAppointmentCommand:
    appointment_id: int
    caller: object
    reason: str = ''


@dataclass
class CheckInAppointmentCommand:
    appointment_id: int
    caller: object


@dataclass
class CompleteAppointmentCommand:
    appointment_id: int
    caller: object


@dataclass
class AddNotesCommand:
    appointment_id: int
    caller: object
    notes: str


def appointment_cost() -> int:
    return getattr(settings, 'APPOINTMENT_CREDIT_COST', 2)


def _load_for_update(appointment_id: int) -> Appointment:
    queryset = Appointment.objects.select_related('patient', 'doctor').filter(pk=appointment_id)
    try:
        return lock_queryset_if_possible(queryset).get()
    except Appointment.DoesNotExist as exc:
        raise NotFoundError("Appointment not found.") from exc


def _ensure_doctor_of(appointment: Appointment, caller) -> None:
    if appointment.doctor_id != getattr(caller, 'pk', None):
        raise PermissionDeniedError("Only the appointment's doctor can do this.")


# ===== Command Handlers =====

class BookAppointmentHandler:
    """
    Handler for BookAppointment command

    1. Validate the interval and that it lies in the future
    2. Requester must be a patient, doctor an active verified doctor
    3. Lock the doctor row, then run the availability engine against the
       doctor's periods and blocking appointments
    4. Create the appointment and move the credits patient -> doctor
    5. Publish AppointmentBooked after commit
    """

    def handle(self, command: BookAppointmentCommand) -> Appointment:
        interval = Interval(command.start_time, command.end_time)
        if command.start_time <= timezone.now():
            raise DomainValidationError("Appointment must start in the future.")

        patient = command.requester
        if not patient.is_patient():
            raise PermissionDeniedError("Only patients can book appointments.")

        User = get_user_model()
        cost = appointment_cost()

        with DjangoUnitOfWork() as uow:
            try:
                doctor = lock_queryset_if_possible(User.objects.filter(pk=command.doctor_id)).get()
            except User.DoesNotExist as exc:
                raise NotFoundError("Doctor not found.") from exc
            if not doctor.is_verified_doctor():
                raise DomainValidationError("Doctor is not accepting appointments.")

            schedule.ensure_available(doctor, interval)

            appointment = Appointment.objects.create(
                patient=patient,
                doctor=doctor,
                start_time=interval.start,
                end_time=interval.end,
                description=command.description,
                credits_charged=cost,
            )
            transfer(
                patient,
                doctor,
                cost,
                type=CreditTransaction.Type.APPOINTMENT_DEDUCTION,
                appointment=appointment,
            )

            uow.add_event(AppointmentBooked(
                aggregate_id=appointment.pk,
                appointment_id=appointment.pk,
                patient_id=patient.pk,
                doctor_id=doctor.pk,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
                credits=cost,
            ))

        logger.info(
            f"Appointment {appointment.pk} booked: patient {patient.pk}, "
            f"doctor {doctor.pk}, {interval}"
        )
        return appointment


class CancelAppointmentHandler:
    """Cancel and reverse the credit movement of the booking"""

    def handle(self, command: CancelAppointmentCommand) -> Appointment:
        with DjangoUnitOfWork() as uow:
            appointment = _load_for_update(command.appointment_id)
            caller_id = getattr(command.caller, 'pk', None)
            if caller_id not in (appointment.patient_id, appointment.doctor_id):
                raise PermissionDeniedError("You can only cancel your own appointments.")
            if not appointment.is_active:
                raise DomainValidationError(
                    f"Appointment cannot be cancelled. Current status: {appointment.status}"
                )

            refund = appointment.credits_charged
            if refund:
                # The doctor may already have cashed the credits out.
                transfer(
                    appointment.doctor,
                    appointment.patient,
                    refund,
                    type=CreditTransaction.Type.APPOINTMENT_REFUND,
                    appointment=appointment,
                    allow_overdraft=True,
                )

            appointment.status = Appointment.Status.CANCELLED
            appointment.cancelled_at = timezone.now()
            appointment.cancellation_reason = command.reason[:255]
            appointment.save(update_fields=['status', 'cancelled_at', 'cancellation_reason', 'updated_at'])

            uow.add_event(AppointmentCancelled(
                aggregate_id=appointment.pk,
                appointment_id=appointment.pk,
                patient_id=appointment.patient_id,
                doctor_id=appointment.doctor_id,
                cancelled_by=caller_id,
                reason=appointment.cancellation_reason,
                refunded_credits=refund,
            ))

        logger.info(f"Appointment {appointment.pk} cancelled by {caller_id}")
        return appointment


class CheckInAppointmentHandler:
    def handle(self, command: CheckInAppointmentCommand) -> Appointment:
        with DjangoUnitOfWork():
            appointment = _load_for_update(command.appointment_id)
            _ensure_doctor_of(appointment, command.caller)
            if appointment.status != Appointment.Status.CONFIRMED:
                raise DomainValidationError("Only confirmed appointments can be checked in.")

            appointment.status = Appointment.Status.CHECKED_IN
            appointment.checked_in_at = timezone.now()
            appointment.save(update_fields=['status', 'checked_in_at', 'updated_at'])

        logger.info(f"Appointment {appointment.pk} checked in")
        return appointment


class CompleteAppointmentHandler:
    """Complete an appointment whose end time has passed"""

    def handle(self, command: CompleteAppointmentCommand) -> Appointment:
        with DjangoUnitOfWork() as uow:
            appointment = _load_for_update(command.appointment_id)
            _ensure_doctor_of(appointment, command.caller)
            if not appointment.is_active:
                raise DomainValidationError(
                    f"Appointment cannot be completed. Current status: {appointment.status}"
                )
            if appointment.end_time > timezone.now():
                raise DomainValidationError("Cannot complete appointment before its end time.")

            mark_completed(appointment)
            uow.add_event(AppointmentCompleted(
                aggregate_id=appointment.pk,
                appointment_id=appointment.pk,
                patient_id=appointment.patient_id,
                doctor_id=appointment.doctor_id,
            ))

        logger.info(f"Appointment {appointment.pk} completed")
        return appointment


class AddNotesHandler:
    def handle(self, command: AddNotesCommand) -> Appointment:
        with DjangoUnitOfWork():
            appointment = _load_for_update(command.appointment_id)
            _ensure_doctor_of(appointment, command.caller)
            if appointment.status == Appointment.Status.CANCELLED:
                raise DomainValidationError("Cannot add notes to a cancelled appointment.")
            appointment.notes = command.notes
            appointment.save(update_fields=['notes', 'updated_at'])
        return appointment


def mark_completed(appointment: Appointment) -> None:
    appointment.status = Appointment.Status.COMPLETED
    appointment.completed_at = timezone.now()
    appointment.save(update_fields=['status', 'completed_at', 'updated_at'])
