"""Credit ledger models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CreditTransaction(models.Model):
    """One signed change of a user's credit balance. Never updated."""

    class Type(models.TextChoices):
        CREDIT_PURCHASE = "CREDIT_PURCHASE", _("Plan allocation")
        APPOINTMENT_DEDUCTION = "APPOINTMENT_DEDUCTION", _("Appointment payment")
        APPOINTMENT_REFUND = "APPOINTMENT_REFUND", _("Appointment refund")
        ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT", _("Admin adjustment")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credit_transactions",
    )
    amount = models.IntegerField(help_text=_("Positive adds credits, negative removes them."))
    type = models.CharField(max_length=32, choices=Type.choices)
    package_id = models.CharField(
        max_length=20,
        blank=True,
        help_text=_("Plan the allocation was granted under."),
    )
    appointment = models.ForeignKey(
        "appointments.Appointment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="credit_transactions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Credit transaction")
        verbose_name_plural = _("Credit transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "type", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.amount:+d} credits for {self.user_id} ({self.type})"


class Payout(models.Model):
    """A doctor's request to cash out earned credits."""

    class Status(models.TextChoices):
        PROCESSING = "PROCESSING", _("Processing")
        PROCESSED = "PROCESSED", _("Processed")

    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payouts",
    )
    credits = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    paypal_email = models.EmailField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PROCESSING)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payouts",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payout")
        verbose_name_plural = _("Payouts")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Payout {self.pk} of {self.credits} credits for {self.doctor_id} ({self.status})"
