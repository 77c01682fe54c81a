"""Ledger service tests: postings, monthly allocation, reconciliation, payouts."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.ledger import services, tasks
from apps.ledger.models import CreditTransaction, Payout
from apps.users.models import User
from shared.domain.exceptions import (
    DomainValidationError,
    InsufficientCreditsError,
    NotFoundError,
    PermissionDeniedError,
)


@pytest.fixture
def patient(db):
    return User.objects.create_user(
        email="patient@example.com",
        password="PatientPass123",
        role=User.Role.PATIENT,
        plan=User.Plan.STANDARD,
    )


@pytest.fixture
def doctor(db):
    return User.objects.create_user(
        email="doctor@example.com",
        password="DoctorPass123",
        role=User.Role.DOCTOR,
        verification_status=User.VerificationStatus.VERIFIED,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(email="admin@example.com", password="AdminPass123")


def _grant(user, amount: int) -> None:
    services.post_entries(
        [services.Entry(user_id=user.pk, amount=amount, type=CreditTransaction.Type.ADMIN_ADJUSTMENT)]
    )
    user.refresh_from_db()


@pytest.mark.django_db
def test_post_entries_moves_cached_balance(patient):
    _grant(patient, 5)
    _grant(patient, -2)

    assert patient.credits == 3
    assert services.ledger_balance(patient) == 3
    assert CreditTransaction.objects.filter(user=patient).count() == 2


@pytest.mark.django_db
def test_zero_entries_are_not_posted(patient):
    rows = services.post_entries(
        [services.Entry(user_id=patient.pk, amount=0, type=CreditTransaction.Type.ADMIN_ADJUSTMENT)]
    )

    assert rows == []
    assert not CreditTransaction.objects.exists()


@pytest.mark.django_db
def test_transfer_writes_two_rows_and_conserves_credits(patient, doctor):
    _grant(patient, 10)

    rows = services.transfer(patient, doctor, 2, type=CreditTransaction.Type.APPOINTMENT_DEDUCTION)

    assert sorted(row.amount for row in rows) == [-2, 2]
    assert patient.credits == 8
    assert doctor.credits == 2
    assert services.ledger_balance(patient) + services.ledger_balance(doctor) == 10


@pytest.mark.django_db
def test_transfer_refuses_short_balance(patient, doctor):
    _grant(patient, 1)

    with pytest.raises(InsufficientCreditsError):
        services.transfer(patient, doctor, 2, type=CreditTransaction.Type.APPOINTMENT_DEDUCTION)

    patient.refresh_from_db()
    assert patient.credits == 1
    assert CreditTransaction.objects.filter(type=CreditTransaction.Type.APPOINTMENT_DEDUCTION).count() == 0


@pytest.mark.django_db
def test_transfer_with_overdraft_allows_negative_balance(patient, doctor):
    services.transfer(doctor, patient, 2, type=CreditTransaction.Type.APPOINTMENT_REFUND, allow_overdraft=True)

    assert doctor.credits == -2
    assert patient.credits == 2


@pytest.mark.django_db
def test_transfer_rejects_non_positive_amount(patient, doctor):
    with pytest.raises(DomainValidationError):
        services.transfer(patient, doctor, 0, type=CreditTransaction.Type.APPOINTMENT_DEDUCTION)


@pytest.mark.django_db
def test_allocate_monthly_is_idempotent_within_month(patient):
    first = services.allocate_monthly(patient)
    second = services.allocate_monthly(patient)

    assert first is not None
    assert first.amount == 10
    assert first.package_id == User.Plan.STANDARD
    assert second is None
    assert patient.credits == 10
    assert CreditTransaction.objects.filter(user=patient, type=CreditTransaction.Type.CREDIT_PURCHASE).count() == 1


@pytest.mark.django_db
def test_allocate_monthly_grants_again_next_month(patient):
    row = services.allocate_monthly(patient)
    CreditTransaction.objects.filter(pk=row.pk).update(created_at=timezone.now() - timedelta(days=40))

    again = services.allocate_monthly(patient)

    assert again is not None
    assert patient.credits == 20


@pytest.mark.django_db
def test_allocate_monthly_ignores_other_entry_types(patient, doctor):
    services.allocate_monthly(patient)
    services.transfer(patient, doctor, 2, type=CreditTransaction.Type.APPOINTMENT_DEDUCTION)

    assert services.allocate_monthly(patient) is None
    assert patient.credits == 8


@pytest.mark.django_db
def test_plan_change_allocates_new_plan(patient):
    services.allocate_monthly(patient)

    row = services.allocate_monthly(patient, User.Plan.PREMIUM)

    assert row is not None
    assert row.amount == 24
    assert patient.plan == User.Plan.PREMIUM
    assert patient.credits == 34


@pytest.mark.django_db
def test_allocate_monthly_skips_non_patients(doctor):
    assert services.allocate_monthly(doctor, User.Plan.PREMIUM) is None
    assert doctor.credits == 0


@pytest.mark.django_db
def test_allocate_monthly_rejects_unknown_plan(patient):
    with pytest.raises(DomainValidationError):
        services.allocate_monthly(patient, "platinum")


@pytest.mark.django_db
def test_allocate_monthly_skips_patient_without_plan(db):
    newcomer = User.objects.create_user(
        email="newcomer@example.com", password="NewcomerPass123", role=User.Role.PATIENT
    )

    assert services.allocate_monthly(newcomer) is None
    newcomer.refresh_from_db()
    assert newcomer.credits == 0
    assert not CreditTransaction.objects.filter(user=newcomer).exists()


@pytest.mark.django_db
def test_monthly_task_continues_past_patient_without_plan(patient):
    User.objects.create_user(
        email="newcomer@example.com", password="NewcomerPass123", role=User.Role.PATIENT
    )

    result = tasks.allocate_monthly_credits()

    assert result == {"allocated": 1, "failed": 0}
    patient.refresh_from_db()
    assert patient.credits == 10


@pytest.mark.django_db
def test_doctor_earnings_reads_current_balance(doctor):
    stale = User.objects.get(pk=doctor.pk)
    services.post_entries(
        [services.Entry(user_id=doctor.pk, amount=6, type=CreditTransaction.Type.ADMIN_ADJUSTMENT)]
    )

    summary = services.doctor_earnings(stale)

    assert summary["credits"] == 6
    assert summary["net_amount"] == Decimal("48.00")


@pytest.mark.django_db
def test_reconcile_repairs_drifted_projection(patient, doctor):
    _grant(patient, 6)
    User.objects.filter(pk=patient.pk).update(credits=99)

    repaired = services.reconcile_balances()

    patient.refresh_from_db()
    assert repaired == 1
    assert patient.credits == 6
    assert services.reconcile_balances() == 0


@pytest.mark.django_db
def test_rebuild_balance_reports_old_and_new(patient):
    _grant(patient, 4)
    User.objects.filter(pk=patient.pk).update(credits=0)

    assert services.rebuild_balance(patient) == (0, 4)
    assert patient.credits == 4


@pytest.mark.django_db
def test_payout_request_and_approval(doctor, admin_user):
    _grant(doctor, 5)

    payout = services.request_payout(doctor, "doc@paypal.example")
    assert payout.credits == 5
    assert payout.amount == Decimal("50")
    assert payout.platform_fee == Decimal("10")
    assert payout.net_amount == Decimal("40")

    approved = services.approve_payout(payout.pk, admin_user)

    doctor.refresh_from_db()
    assert approved.status == Payout.Status.PROCESSED
    assert approved.processed_by == admin_user
    assert doctor.credits == 0
    assert services.ledger_balance(doctor) == 0


@pytest.mark.django_db
def test_second_pending_payout_is_refused(doctor):
    _grant(doctor, 3)
    services.request_payout(doctor, "doc@paypal.example")

    with pytest.raises(DomainValidationError):
        services.request_payout(doctor, "doc@paypal.example")


@pytest.mark.django_db
def test_payout_requires_credits_and_doctor_role(doctor, patient):
    with pytest.raises(InsufficientCreditsError):
        services.request_payout(doctor, "doc@paypal.example")
    with pytest.raises(PermissionDeniedError):
        services.request_payout(patient, "patient@paypal.example")


@pytest.mark.django_db
def test_processed_payout_cannot_be_approved_twice(doctor, admin_user):
    _grant(doctor, 2)
    payout = services.request_payout(doctor, "doc@paypal.example")
    services.approve_payout(payout.pk, admin_user)

    with pytest.raises(NotFoundError):
        services.approve_payout(payout.pk, admin_user)


@pytest.mark.django_db
def test_approval_refused_when_balance_dropped(doctor, admin_user):
    _grant(doctor, 4)
    payout = services.request_payout(doctor, "doc@paypal.example")
    _grant(doctor, -3)

    with pytest.raises(InsufficientCreditsError):
        services.approve_payout(payout.pk, admin_user)
