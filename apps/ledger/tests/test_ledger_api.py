"""Integration tests for the credits and payouts API."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.ledger import services
from apps.ledger.models import CreditTransaction, Payout
from apps.users.models import User


class CreditAPITests(APITestCase):
    def setUp(self) -> None:
        self.patient = User.objects.create_user(
            email="patient@example.com",
            password="PatientPass123",
            role=User.Role.PATIENT,
            plan=User.Plan.PREMIUM,
        )
        self.client.force_authenticate(self.patient)

    def test_allocate_then_balance(self) -> None:
        response = self.client.post(reverse("credit-allocate"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["allocated"], 24)

        repeat = self.client.post(reverse("credit-allocate"), {}, format="json")
        self.assertEqual(repeat.status_code, status.HTTP_200_OK, repeat.data)
        self.assertEqual(repeat.data["allocated"], 0)

        balance = self.client.get(reverse("credit-balance"))
        self.assertEqual(balance.data["credits"], 24)
        self.assertEqual(balance.data["appointment_cost"], 2)

    def test_unknown_plan_is_rejected(self) -> None:
        response = self.client.post(reverse("credit-allocate"), {"plan": "gold"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_allocate_without_plan_grants_nothing(self) -> None:
        newcomer = User.objects.create_user(email="newcomer@example.com", role=User.Role.PATIENT)
        self.client.force_authenticate(newcomer)

        response = self.client.post(reverse("credit-allocate"), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["allocated"], 0)
        self.assertEqual(response.data["credits"], 0)

    def test_history_lists_only_own_entries(self) -> None:
        other = User.objects.create_user(email="other@example.com", role=User.Role.PATIENT)
        services.allocate_monthly(self.patient)
        services.allocate_monthly(other, User.Plan.STANDARD)

        response = self.client.get(reverse("credit-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["amount"], 24)

    def test_earnings_forbidden_for_patient(self) -> None:
        response = self.client.get(reverse("credit-earnings"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PayoutAPITests(APITestCase):
    def setUp(self) -> None:
        self.doctor = User.objects.create_user(
            email="doctor@example.com",
            password="DoctorPass123",
            role=User.Role.DOCTOR,
            verification_status=User.VerificationStatus.VERIFIED,
        )
        self.admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")
        services.post_entries(
            [services.Entry(user_id=self.doctor.pk, amount=6, type=CreditTransaction.Type.ADMIN_ADJUSTMENT)]
        )
        self.doctor.refresh_from_db()

    def test_doctor_requests_and_admin_approves(self) -> None:
        self.client.force_authenticate(self.doctor)
        response = self.client.post(
            reverse("payout-list"), {"paypal_email": "doc@paypal.example"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        payout_id = response.data["id"]

        duplicate = self.client.post(
            reverse("payout-list"), {"paypal_email": "doc@paypal.example"}, format="json"
        )
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        forbidden = self.client.post(reverse("payout-approve", args=[payout_id]))
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        approved = self.client.post(reverse("payout-approve", args=[payout_id]))
        self.assertEqual(approved.status_code, status.HTTP_200_OK, approved.data)
        self.assertEqual(approved.data["status"], Payout.Status.PROCESSED)

        self.doctor.refresh_from_db()
        self.assertEqual(self.doctor.credits, 0)

        again = self.client.post(reverse("payout-approve", args=[payout_id]))
        self.assertEqual(again.status_code, status.HTTP_404_NOT_FOUND)

    def test_earnings_summary(self) -> None:
        self.client.force_authenticate(self.doctor)
        response = self.client.get(reverse("credit-earnings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["credits"], 6)
        self.assertEqual(response.data["net_amount"], "48.00")
        self.assertEqual(response.data["completed_appointments"], 0)

    def test_approve_with_non_numeric_id_is_not_found(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/v1/credits/payouts/abc/approve/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
