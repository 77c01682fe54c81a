"""Abstract models shared by every bookable resource."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Interval

from .domain.availability import BookingStatus


class IntervalModelMixin:
    """Exposes the model's start/end columns as an ``Interval``."""

    interval_start_field: str = "start"
    interval_end_field: str = "end"

    @property
    def interval(self) -> Interval:
        return Interval(
            getattr(self, self.interval_start_field),
            getattr(self, self.interval_end_field),
        )


class ReservationRecord(IntervalModelMixin, models.Model):
    """Base for appointment and cabin booking rows."""

    class Status(models.TextChoices):
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CHECKED_IN = BookingStatus.CHECKED_IN.value, _("Checked in")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")

    ACTIVE_STATUSES = (Status.CONFIRMED, Status.CHECKED_IN)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES


class AvailabilityWindowRecord(IntervalModelMixin, models.Model):
    """Base for allow-list availability periods."""

    is_active = models.BooleanField(default=True)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
