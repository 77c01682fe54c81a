"""Cabin, availability period and booking models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.scheduling.models import AvailabilityWindowRecord, ReservationRecord


class Cabin(models.Model):
    class CabinType(models.TextChoices):
        STANDARD = "STANDARD", _("Standard")
        DELUXE = "DELUXE", _("Deluxe")
        SUITE = "SUITE", _("Suite")
        VIP = "VIP", _("VIP")
        ICU = "ICU", _("ICU")
        PRIVATE_ROOM = "PRIVATE_ROOM", _("Private room")

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    cabin_type = models.CharField(max_length=20, choices=CabinType.choices, default=CabinType.STANDARD)
    room_number = models.CharField(max_length=20, unique=True)
    floor = models.CharField(max_length=20, blank=True)
    wing = models.CharField(max_length=50, blank=True)
    capacity = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    amenities = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Cabin")
        verbose_name_plural = _("Cabins")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.room_number})"


class CabinAvailability(AvailabilityWindowRecord):
    """Date range in which a cabin may be booked. Managed by admins."""

    interval_start_field = "start_date"
    interval_end_field = "end_date"

    cabin = models.ForeignKey(Cabin, on_delete=models.CASCADE, related_name="availability_periods")
    start_date = models.DateField()
    end_date = models.DateField()

    class Meta:
        verbose_name = _("Cabin availability")
        verbose_name_plural = _("Cabin availability")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="cabin_availability_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.cabin_id}: {self.start_date} - {self.end_date}"


class CabinBooking(ReservationRecord):
    interval_start_field = "check_in_date"
    interval_end_field = "check_out_date"

    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PAID = "PAID", _("Paid")
        REFUNDED = "REFUNDED", _("Refunded")

    booking_number = models.CharField(max_length=20, unique=True, editable=False)
    cabin = models.ForeignKey(Cabin, on_delete=models.PROTECT, related_name="bookings")
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cabin_bookings",
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    nights = models.PositiveSmallIntegerField()
    guest_name = models.CharField(max_length=255)
    guest_phone = models.CharField(max_length=32, blank=True)
    guest_email = models.EmailField(blank=True)
    guests_count = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    special_requests = models.TextField(blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_method = models.CharField(max_length=50, blank=True)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    paid_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name = _("Cabin booking")
        verbose_name_plural = _("Cabin bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["cabin", "status", "check_in_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gt=models.F("check_in_date")),
                name="cabin_booking_check_out_after_check_in",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.booking_number} ({self.cabin_id}: {self.check_in_date} - {self.check_out_date})"
