"""Models for doctor availability and appointments."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.scheduling.models import AvailabilityWindowRecord, ReservationRecord


class DoctorAvailability(AvailabilityWindowRecord):
    """A window in which a doctor accepts appointments."""

    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="availability_periods",
    )
    start = models.DateTimeField()
    end = models.DateTimeField()

    class Meta:
        verbose_name = _("Doctor availability")
        verbose_name_plural = _("Doctor availability")
        ordering = ["start"]
        indexes = [
            models.Index(fields=["doctor", "start", "end"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end__gt=models.F("start")),
                name="doctor_availability_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.doctor_id}: {self.start:%Y-%m-%d %H:%M} - {self.end:%Y-%m-%d %H:%M}"


class Appointment(ReservationRecord):
    """A patient's booking of a doctor's time."""

    interval_start_field = "start_time"
    interval_end_field = "end_time"

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="appointments",
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="doctor_appointments",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    description = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    credits_charged = models.PositiveIntegerField(default=0)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _("Appointment")
        verbose_name_plural = _("Appointments")
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["doctor", "status", "start_time"]),
            models.Index(fields=["patient", "status"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="appointment_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"Appointment {self.pk} {self.patient_id} -> {self.doctor_id} at {self.start_time:%Y-%m-%d %H:%M}"
