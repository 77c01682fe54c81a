"""Credit ledger services.

Every balance change goes through ``post_entries``: it appends the ledger
rows and moves the cached ``credits`` column with an ``F()`` expression in
the same transaction, so the projection never drifts from the ledger sum
unless something writes the column behind the ledger's back.
``reconcile_balances`` finds and repairs such drift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import F, IntegerField, Sum, Value  # type: ignore
from django.db.models.functions import Coalesce  # type: ignore
from django.utils import timezone  # type: ignore

from apps.scheduling.services import lock_queryset_if_possible
from shared.domain.exceptions import (
    DomainValidationError,
    InsufficientCreditsError,
    NotFoundError,
    PermissionDeniedError,
)

from .models import CreditTransaction, Payout

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class Entry:
    """A ledger row waiting to be posted."""

    user_id: int
    amount: int
    type: str
    package_id: str = ""
    appointment_id: Optional[int] = None


def plan_credits() -> dict[str, int]:
    return dict(getattr(settings, "PLAN_CREDITS", {"free_user": 0, "standard": 10, "premium": 24}))


def _lock_user(user_id: int):
    try:
        return lock_queryset_if_possible(User.objects.filter(pk=user_id)).get()
    except User.DoesNotExist as exc:
        raise NotFoundError("User not found.") from exc


@transaction.atomic
def post_entries(entries: Sequence[Entry]) -> List[CreditTransaction]:
    """Append ledger rows and move the cached balances by the same amounts."""

    posted: List[CreditTransaction] = []
    for entry in entries:
        if entry.amount == 0:
            continue
        posted.append(
            CreditTransaction.objects.create(
                user_id=entry.user_id,
                amount=entry.amount,
                type=entry.type,
                package_id=entry.package_id,
                appointment_id=entry.appointment_id,
            )
        )
        User.objects.filter(pk=entry.user_id).update(credits=F("credits") + entry.amount)
    return posted


@transaction.atomic
def transfer(
    payer,
    payee,
    amount: int,
    *,
    type: str,
    appointment=None,
    allow_overdraft: bool = False,
) -> List[CreditTransaction]:
    """Move ``amount`` credits from ``payer`` to ``payee`` as two ledger rows.

    The payer row is locked first; unless ``allow_overdraft`` is set the
    move is refused when the payer's balance is short.
    """

    if amount <= 0:
        raise DomainValidationError("Transfer amount must be positive.")

    locked = _lock_user(payer.pk)
    if not allow_overdraft and locked.credits < amount:
        raise InsufficientCreditsError(
            f"Insufficient credits: {amount} required, {locked.credits} available."
        )

    appointment_id = getattr(appointment, "pk", None)
    rows = post_entries(
        [
            Entry(user_id=payer.pk, amount=-amount, type=type, appointment_id=appointment_id),
            Entry(user_id=payee.pk, amount=amount, type=type, appointment_id=appointment_id),
        ]
    )
    payer.refresh_from_db(fields=["credits"])
    payee.refresh_from_db(fields=["credits"])
    return rows


def _month_key(moment: datetime) -> Tuple[int, int]:
    local = timezone.localtime(moment) if timezone.is_aware(moment) else moment
    return local.year, local.month


@transaction.atomic
def allocate_monthly(user, plan: Optional[str] = None, *, now: Optional[datetime] = None) -> Optional[CreditTransaction]:
    """Grant the plan's monthly credits once per calendar month.

    Returns the new ledger row, or ``None`` when the user has no plan, is
    not a patient, or already received an allocation for the same plan this
    month. Switching plans mid-month grants the new plan's credits once more.
    """

    credits_by_plan = plan_credits()
    plan = plan or user.plan
    if not plan:
        logger.debug(f"User {user.pk} has no plan, skipping monthly allocation")
        return None
    if plan not in credits_by_plan:
        raise DomainValidationError(f"Unknown plan {plan}.")

    locked = _lock_user(user.pk)
    if not locked.is_patient():
        return None

    now = now or timezone.now()
    latest = (
        CreditTransaction.objects.filter(user_id=locked.pk, type=CreditTransaction.Type.CREDIT_PURCHASE)
        .order_by("-created_at", "-id")
        .first()
    )
    if latest is not None and _month_key(latest.created_at) == _month_key(now) and latest.package_id == plan:
        return None

    if locked.plan != plan:
        User.objects.filter(pk=locked.pk).update(plan=plan)

    amount = credits_by_plan[plan]
    row = CreditTransaction.objects.create(
        user_id=locked.pk,
        amount=amount,
        type=CreditTransaction.Type.CREDIT_PURCHASE,
        package_id=plan,
    )
    if amount:
        User.objects.filter(pk=locked.pk).update(credits=F("credits") + amount)
    user.refresh_from_db(fields=["credits", "plan"])
    logger.info(f"Allocated {amount} credits to user {user.pk} for plan {plan}")
    return row


def ledger_balance(user) -> int:
    result = CreditTransaction.objects.filter(user_id=user.pk).aggregate(total=Sum("amount"))
    return result["total"] or 0


@transaction.atomic
def rebuild_balance(user) -> Tuple[int, int]:
    """Overwrite the cached balance with the ledger sum. Returns ``(old, new)``."""

    locked = _lock_user(user.pk)
    old = locked.credits
    new = ledger_balance(locked)
    if old != new:
        User.objects.filter(pk=locked.pk).update(credits=new)
        logger.warning(f"Rebuilt credits for user {locked.pk}: {old} -> {new}")
    user.credits = new
    return old, new


def drifted_users():
    """Users whose cached balance differs from their ledger sum."""

    return User.objects.annotate(
        ledger_total=Coalesce(Sum("credit_transactions__amount"), Value(0), output_field=IntegerField())
    ).exclude(credits=F("ledger_total"))


def reconcile_balances() -> int:
    repaired = 0
    for user in drifted_users():
        rebuild_balance(user)
        repaired += 1
    return repaired


def history(user) -> Iterable[CreditTransaction]:
    return CreditTransaction.objects.filter(user_id=user.pk).select_related("appointment")


# --- payouts --------------------------------------------------------------

def payout_breakdown(credits: int) -> Tuple[Decimal, Decimal, Decimal]:
    """Gross amount, platform fee and doctor net for ``credits``."""

    value = Decimal(str(getattr(settings, "CREDIT_VALUE", 10)))
    fee = Decimal(str(getattr(settings, "PLATFORM_FEE_PER_CREDIT", 2)))
    net = Decimal(str(getattr(settings, "DOCTOR_EARNINGS_PER_CREDIT", 8)))
    return credits * value, credits * fee, credits * net


@transaction.atomic
def request_payout(doctor, paypal_email: str) -> Payout:
    """Ask for the doctor's whole balance to be paid out."""

    if not doctor.is_doctor():
        raise PermissionDeniedError("Only doctors can request payouts.")

    locked = _lock_user(doctor.pk)
    if Payout.objects.filter(doctor_id=locked.pk, status=Payout.Status.PROCESSING).exists():
        raise DomainValidationError("You already have a pending payout request.")
    if locked.credits < 1:
        raise InsufficientCreditsError("Minimum 1 credit required for payout.")

    amount, fee, net = payout_breakdown(locked.credits)
    payout = Payout.objects.create(
        doctor_id=locked.pk,
        credits=locked.credits,
        amount=amount,
        platform_fee=fee,
        net_amount=net,
        paypal_email=paypal_email,
    )
    logger.info(f"Payout {payout.pk} requested by doctor {locked.pk} for {locked.credits} credits")
    return payout


@transaction.atomic
def approve_payout(payout_id: int, admin) -> Payout:
    """Mark a payout processed and debit the credits from the doctor."""

    try:
        payout = lock_queryset_if_possible(
            Payout.objects.filter(pk=payout_id, status=Payout.Status.PROCESSING)
        ).get()
    except Payout.DoesNotExist as exc:
        raise NotFoundError("Payout request not found or already processed.") from exc

    doctor = _lock_user(payout.doctor_id)
    if doctor.credits < payout.credits:
        raise InsufficientCreditsError("Doctor no longer has enough credits for this payout.")

    post_entries(
        [
            Entry(
                user_id=doctor.pk,
                amount=-payout.credits,
                type=CreditTransaction.Type.ADMIN_ADJUSTMENT,
            )
        ]
    )
    payout.status = Payout.Status.PROCESSED
    payout.processed_at = timezone.now()
    payout.processed_by = admin
    payout.save(update_fields=["status", "processed_at", "processed_by", "updated_at"])
    logger.info(f"Payout {payout.pk} approved by {getattr(admin, 'pk', None)}")
    return payout


def doctor_earnings(doctor, *, today: Optional[date] = None) -> dict:
    """Completed-appointment counts and the value of the current balance."""

    from apps.appointments.models import Appointment

    today = today or timezone.localdate()
    completed = Appointment.objects.filter(doctor_id=doctor.pk, status=Appointment.Status.COMPLETED)
    this_month = completed.filter(
        completed_at__year=today.year,
        completed_at__month=today.month,
    )
    credits = User.objects.filter(pk=doctor.pk).values_list("credits", flat=True).get()
    amount, fee, net = payout_breakdown(credits)
    pending = Payout.objects.filter(doctor_id=doctor.pk, status=Payout.Status.PROCESSING).first()
    return {
        "credits": credits,
        "gross_amount": amount,
        "platform_fee": fee,
        "net_amount": net,
        "completed_appointments": completed.count(),
        "completed_this_month": this_month.count(),
        "pending_payout_id": pending.pk if pending else None,
    }
