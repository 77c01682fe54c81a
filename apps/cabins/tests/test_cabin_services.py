"""Cabin booking and calendar service tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.cabins import services
from apps.cabins.models import Cabin, CabinBooking
from apps.cabins.tasks import complete_finished_cabin_bookings
from apps.ledger.models import CreditTransaction
from apps.users.models import User
from shared.domain.exceptions import (
    BookingConflictError,
    DomainValidationError,
    InvalidIntervalError,
    NotFoundError,
    PermissionDeniedError,
)


def days(n: int) -> date:
    return timezone.localdate() + timedelta(days=n)


@pytest.fixture
def patient(db):
    return User.objects.create_user(email="patient@example.com", role=User.Role.PATIENT)


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(email="admin@example.com", password="AdminPass123")


@pytest.fixture
def cabin(db):
    return Cabin.objects.create(
        name="Garden suite",
        cabin_type=Cabin.CabinType.SUITE,
        room_number="101",
        capacity=2,
        price_per_night=Decimal("150.00"),
        amenities=["wifi", "tv"],
    )


def details(**overrides):
    values = {"guest_name": "Jane Doe", "guests_count": 1}
    values.update(overrides)
    return services.GuestDetails(**values)


@pytest.mark.django_db
def test_booking_records_nights_and_amount(cabin, patient):
    booking = services.book_cabin(cabin.pk, days(5), days(8), patient, details())

    assert booking.booking_number.startswith("CB")
    assert len(booking.booking_number) == 12
    assert booking.nights == 3
    assert booking.total_amount == Decimal("450.00")
    assert booking.status == CabinBooking.Status.CONFIRMED
    assert booking.payment_status == CabinBooking.PaymentStatus.PENDING
    assert not CreditTransaction.objects.exists()


@pytest.mark.django_db
def test_overlapping_stay_is_rejected_and_adjacent_allowed(cabin, patient):
    services.book_cabin(cabin.pk, days(5), days(8), patient, details())

    with pytest.raises(BookingConflictError):
        services.book_cabin(cabin.pk, days(7), days(10), patient, details())
    with pytest.raises(BookingConflictError):
        services.book_cabin(cabin.pk, days(3), days(6), patient, details())
    with pytest.raises(BookingConflictError):
        services.book_cabin(cabin.pk, days(4), days(9), patient, details())

    services.book_cabin(cabin.pk, days(8), days(10), patient, details())
    assert CabinBooking.objects.count() == 2


@pytest.mark.django_db
def test_booking_guards(cabin, patient):
    with pytest.raises(InvalidIntervalError):
        services.book_cabin(cabin.pk, days(5), days(5), patient, details())
    with pytest.raises(DomainValidationError):
        services.book_cabin(cabin.pk, days(-1), days(2), patient, details())
    with pytest.raises(DomainValidationError):
        services.book_cabin(cabin.pk, days(1), days(2), patient, details(guests_count=3))
    with pytest.raises(NotFoundError):
        services.book_cabin(999999, days(1), days(2), patient, details())

    cabin.is_active = False
    cabin.save()
    with pytest.raises(DomainValidationError):
        services.book_cabin(cabin.pk, days(1), days(2), patient, details())


@pytest.mark.django_db
def test_periods_restrict_bookings(cabin, patient):
    services.create_period(cabin, days(10), days(20))

    with pytest.raises(BookingConflictError) as excinfo:
        services.book_cabin(cabin.pk, days(18), days(22), patient, details())
    assert "outside available periods" in str(excinfo.value)

    services.book_cabin(cabin.pk, days(12), days(15), patient, details())


@pytest.mark.django_db
def test_periods_of_one_cabin_cannot_overlap(cabin):
    services.create_period(cabin, days(10), days(20))

    with pytest.raises(DomainValidationError):
        services.create_period(cabin, days(15), days(25))

    services.create_period(cabin, days(20), days(25))


@pytest.mark.django_db
def test_free_ranges_leave_a_day_around_bookings(cabin, patient):
    services.create_period(cabin, days(1), days(31))
    services.book_cabin(cabin.pk, days(10), days(15), patient, details())

    ranges = services.free_ranges(cabin)

    assert [(r.start, r.end) for r in ranges] == [(days(1), days(9)), (days(16), days(31))]


@pytest.mark.django_db
def test_free_ranges_none_without_periods(cabin):
    assert services.free_ranges(cabin) is None
    assert services.disabled_dates(cabin) == []


@pytest.mark.django_db
def test_disabled_dates_cover_days_outside_free_ranges(cabin, patient):
    services.create_period(cabin, days(2), days(6))
    services.book_cabin(cabin.pk, days(3), days(4), patient, details())

    disabled = services.disabled_dates(cabin, horizon_days=8)

    # Only [d5, d6] is free: the gap before the booking is a single, degenerate day.
    assert days(5) not in disabled
    assert days(6) not in disabled
    assert days(0) in disabled
    assert days(3) in disabled
    assert days(8) in disabled
    assert len(disabled) == 7


@pytest.mark.django_db
def test_cancel_frees_dates(cabin, patient, admin_user):
    booking = services.book_cabin(cabin.pk, days(5), days(8), patient, details())
    stranger = User.objects.create_user(email="stranger@example.com", role=User.Role.PATIENT)

    with pytest.raises(PermissionDeniedError):
        services.cancel_cabin_booking(booking.pk, stranger)

    cancelled = services.cancel_cabin_booking(booking.pk, patient, "Plans changed")
    assert cancelled.status == CabinBooking.Status.CANCELLED
    assert cancelled.notes == "Cancelled: Plans changed"

    with pytest.raises(DomainValidationError):
        services.cancel_cabin_booking(booking.pk, admin_user)

    assert services.check_availability(cabin, days(5), days(8)).available


@pytest.mark.django_db
def test_admin_status_flow_and_payment(cabin, patient):
    booking = services.book_cabin(cabin.pk, days(1), days(3), patient, details())

    with pytest.raises(DomainValidationError):
        services.update_booking_status(booking.pk, CabinBooking.Status.COMPLETED)

    services.update_booking_status(booking.pk, CabinBooking.Status.CHECKED_IN)
    done = services.update_booking_status(booking.pk, CabinBooking.Status.COMPLETED, "Discharged")
    assert done.completed_at is not None
    assert done.notes == "Discharged"

    paid = services.record_payment(booking.pk, CabinBooking.PaymentStatus.PAID, Decimal("300.00"))
    assert paid.paid_at is not None

    stats = services.booking_stats()
    assert stats["total"] == 1
    assert stats["completed"] == 1
    assert stats["revenue"] == Decimal("300.00")


@pytest.mark.django_db
def test_available_cabins_search(cabin, patient):
    other = Cabin.objects.create(
        name="ICU bay",
        cabin_type=Cabin.CabinType.ICU,
        room_number="ICU-1",
        capacity=1,
        price_per_night=Decimal("400.00"),
    )
    services.book_cabin(cabin.pk, days(5), days(8), patient, details())

    free = services.available_cabins(days(6), days(7))

    assert free == [other]
    assert services.filter_by_amenities([cabin, other], ["wifi"]) == [cabin]


@pytest.mark.django_db
def test_periodic_task_completes_past_stays(cabin, patient):
    booking = CabinBooking.objects.create(
        booking_number="CB000001ABCD",
        cabin=cabin,
        patient=patient,
        check_in_date=days(-5),
        check_out_date=days(-2),
        nights=3,
        guest_name="Jane Doe",
        total_amount=Decimal("450.00"),
    )

    assert complete_finished_cabin_bookings() == {"completed": 1}
    booking.refresh_from_db()
    assert booking.status == CabinBooking.Status.COMPLETED
