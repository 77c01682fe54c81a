"""Cabin booking, calendar and administration services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, List, Optional
from uuid import uuid4

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.scheduling.domain import availability as engine
from apps.scheduling.domain.availability import AvailabilityResult
from apps.scheduling.services import ResourceSchedule, lock_queryset_if_possible
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError
from shared.domain.value_objects import Interval

from .domain.events import CabinBooked, CabinBookingCancelled
from .models import Cabin, CabinAvailability, CabinBooking

logger = logging.getLogger(__name__)

schedule = ResourceSchedule(
    booking_model=CabinBooking,
    period_model=CabinAvailability,
    resource_field="cabin",
    label="Cabin",
    step=engine.DAY,
)

# Admin status moves; any active booking may also be cancelled.
STATUS_TRANSITIONS = {
    CabinBooking.Status.CONFIRMED: {CabinBooking.Status.CHECKED_IN, CabinBooking.Status.CANCELLED},
    CabinBooking.Status.CHECKED_IN: {CabinBooking.Status.COMPLETED, CabinBooking.Status.CANCELLED},
}


@dataclass
class GuestDetails:
    guest_name: str
    guest_phone: str = ""
    guest_email: str = ""
    guests_count: int = 1
    special_requests: str = ""
    payment_method: str = ""


def generate_booking_number() -> str:
    """CB + last six digits of the millisecond clock + four random characters."""
    millis = str(int(timezone.now().timestamp() * 1000))[-6:]
    return f"CB{millis}{uuid4().hex[:4].upper()}"


def _load_booking_for_update(booking_id: int) -> CabinBooking:
    queryset = CabinBooking.objects.select_related("cabin").filter(pk=booking_id)
    try:
        return lock_queryset_if_possible(queryset).get()
    except CabinBooking.DoesNotExist as exc:
        raise NotFoundError("Booking not found.") from exc


def book_cabin(cabin_id: int, check_in: date, check_out: date, requester, details: GuestDetails) -> CabinBooking:
    """
    Book a cabin for ``[check_in, check_out)``.

    The cabin row is locked for the duration of the check so that two
    concurrent requests for the same cabin are serialized.
    """
    interval = Interval(check_in, check_out)
    if check_in < timezone.localdate():
        raise DomainValidationError("Check-in date cannot be in the past.")
    if details.guests_count < 1:
        raise DomainValidationError("At least one guest is required.")

    with DjangoUnitOfWork() as uow:
        try:
            cabin = lock_queryset_if_possible(Cabin.objects.filter(pk=cabin_id)).get()
        except Cabin.DoesNotExist as exc:
            raise NotFoundError("Cabin not found.") from exc
        if not cabin.is_active:
            raise DomainValidationError("Cabin is not available for booking.")
        if details.guests_count > cabin.capacity:
            raise DomainValidationError(f"Number of guests exceeds cabin capacity ({cabin.capacity}).")

        schedule.ensure_available(cabin, interval)

        nights = interval.days
        booking = CabinBooking.objects.create(
            booking_number=generate_booking_number(),
            cabin=cabin,
            patient=requester,
            check_in_date=check_in,
            check_out_date=check_out,
            nights=nights,
            total_amount=cabin.price_per_night * nights,
            guest_name=details.guest_name,
            guest_phone=details.guest_phone,
            guest_email=details.guest_email,
            guests_count=details.guests_count,
            special_requests=details.special_requests,
            payment_method=details.payment_method,
        )
        uow.add_event(CabinBooked(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            booking_number=booking.booking_number,
            cabin_id=cabin.pk,
            patient_id=requester.pk,
            check_in_date=check_in,
            check_out_date=check_out,
        ))

    logger.info(f"Cabin booking {booking.booking_number} created for cabin {cabin.pk}, {interval}")
    return booking


def cancel_cabin_booking(booking_id: int, caller, reason: str = "") -> CabinBooking:
    with DjangoUnitOfWork() as uow:
        booking = _load_booking_for_update(booking_id)
        if not caller.is_admin() and booking.patient_id != caller.pk:
            raise PermissionDeniedError("You can only cancel your own bookings.")
        if booking.status == CabinBooking.Status.CANCELLED:
            raise DomainValidationError("Booking is already cancelled.")
        if booking.status == CabinBooking.Status.COMPLETED:
            raise DomainValidationError("Cannot cancel a completed booking.")

        booking.status = CabinBooking.Status.CANCELLED
        booking.cancelled_at = timezone.now()
        booking.notes = f"Cancelled: {reason}" if reason else "Cancelled by user"
        booking.save(update_fields=["status", "cancelled_at", "notes", "updated_at"])
        uow.add_event(CabinBookingCancelled(
            aggregate_id=booking.pk,
            booking_id=booking.pk,
            booking_number=booking.booking_number,
            cabin_id=booking.cabin_id,
            patient_id=booking.patient_id,
            reason=reason,
        ))

    logger.info(f"Cabin booking {booking.booking_number} cancelled by {caller.pk}")
    return booking


@transaction.atomic
def update_booking_status(booking_id: int, new_status: str, notes: str = "") -> CabinBooking:
    booking = _load_booking_for_update(booking_id)
    allowed = STATUS_TRANSITIONS.get(booking.status, set())
    if new_status not in allowed:
        raise DomainValidationError(f"Cannot change booking status from {booking.status} to {new_status}.")

    now = timezone.now()
    booking.status = new_status
    if notes:
        booking.notes = notes
    if new_status == CabinBooking.Status.CHECKED_IN:
        booking.checked_in_at = now
    elif new_status == CabinBooking.Status.COMPLETED:
        booking.completed_at = now
    elif new_status == CabinBooking.Status.CANCELLED:
        booking.cancelled_at = now
    booking.save()
    logger.info(f"Cabin booking {booking.booking_number} moved to {new_status}")
    return booking


@transaction.atomic
def record_payment(booking_id: int, payment_status: str, paid_amount: Optional[Decimal] = None) -> CabinBooking:
    if payment_status not in CabinBooking.PaymentStatus.values:
        raise DomainValidationError(f"Unknown payment status {payment_status}.")
    booking = _load_booking_for_update(booking_id)
    booking.payment_status = payment_status
    if paid_amount is not None and paid_amount > 0:
        booking.paid_amount = paid_amount
    if payment_status == CabinBooking.PaymentStatus.PAID:
        booking.paid_at = timezone.now()
    booking.save(update_fields=["payment_status", "paid_amount", "paid_at", "updated_at"])
    logger.info(f"Cabin booking {booking.booking_number} payment {payment_status}")
    return booking


def booking_stats() -> dict[str, Any]:
    totals = CabinBooking.objects.aggregate(
        total=Count("id"),
        confirmed=Count("id", filter=Q(status=CabinBooking.Status.CONFIRMED)),
        checked_in=Count("id", filter=Q(status=CabinBooking.Status.CHECKED_IN)),
        completed=Count("id", filter=Q(status=CabinBooking.Status.COMPLETED)),
        cancelled=Count("id", filter=Q(status=CabinBooking.Status.CANCELLED)),
        pending_payment=Count("id", filter=Q(payment_status=CabinBooking.PaymentStatus.PENDING)),
        revenue=Sum("paid_amount", filter=Q(payment_status=CabinBooking.PaymentStatus.PAID)),
    )
    totals["revenue"] = totals["revenue"] or Decimal("0")
    return totals


# --- calendar -------------------------------------------------------------

def check_availability(cabin: Cabin, check_in: date, check_out: date) -> AvailabilityResult:
    return schedule.check(cabin, Interval(check_in, check_out))


def free_ranges(cabin: Cabin, *, today: Optional[date] = None) -> Optional[List[Interval]]:
    """Free date ranges from today on, or ``None`` when the cabin has no periods."""
    return schedule.free_ranges(cabin, since=today or timezone.localdate())


def disabled_dates(cabin: Cabin, *, today: Optional[date] = None, horizon_days: Optional[int] = None) -> List[date]:
    """Days in the booking horizon that fall outside every free range."""
    today = today or timezone.localdate()
    ranges = free_ranges(cabin, today=today)
    if ranges is None:
        return []
    if horizon_days is None:
        horizon_days = getattr(settings, "CABIN_CALENDAR_HORIZON_DAYS", 365)

    disabled = []
    for offset in range(horizon_days + 1):
        day = today + timedelta(days=offset)
        if not any(free.contains(day, inclusive_end=True) for free in ranges):
            disabled.append(day)
    return disabled


def filter_by_amenities(cabins: Iterable[Cabin], amenities: Iterable[str]) -> List[Cabin]:
    wanted = set(amenities)
    return [cabin for cabin in cabins if wanted.issubset(cabin.amenities or [])]


def available_cabins(check_in: date, check_out: date, queryset=None) -> List[Cabin]:
    """Active cabins of ``queryset`` that can be booked for the whole stay."""
    interval = Interval(check_in, check_out)
    queryset = Cabin.objects.filter(is_active=True) if queryset is None else queryset.filter(is_active=True)
    return [cabin for cabin in queryset if schedule.check(cabin, interval)]


# --- availability periods -------------------------------------------------

@transaction.atomic
def create_period(cabin: Cabin, start_date: date, end_date: date, reason: str = "") -> CabinAvailability:
    interval = Interval(start_date, end_date)
    schedule.ensure_period_does_not_overlap(cabin, interval)
    period = CabinAvailability.objects.create(
        cabin=cabin,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
    )
    logger.info(f"Cabin {cabin.pk} availability added: {interval}")
    return period


@transaction.atomic
def update_period(period: CabinAvailability, **changes) -> CabinAvailability:
    start_date = changes.get("start_date", period.start_date)
    end_date = changes.get("end_date", period.end_date)
    is_active = changes.get("is_active", period.is_active)
    interval = Interval(start_date, end_date)
    if is_active:
        schedule.ensure_period_does_not_overlap(period.cabin, interval, exclude_id=period.pk)

    period.start_date = start_date
    period.end_date = end_date
    period.is_active = is_active
    period.reason = changes.get("reason", period.reason)
    period.save()
    return period


def delete_cabin(cabin: Cabin) -> None:
    if CabinBooking.objects.filter(cabin=cabin, status__in=CabinBooking.ACTIVE_STATUSES).exists():
        raise DomainValidationError("Cannot delete a cabin with active bookings.")
    if cabin.bookings.exists():
        cabin.is_active = False
        cabin.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Cabin {cabin.pk} deactivated")
        return
    cabin.delete()
