"""Tests for onboarding, the doctor directory and admin verification."""

from __future__ import annotations

import pytest
from django.contrib.auth.models import AnonymousUser
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.identity import (
    ANONYMOUS,
    get_or_create_from_identity,
    get_user_by_external_id,
    resolve_identity,
)
from apps.users.models import User
from shared.domain.exceptions import NotFoundError

DOCTOR_PROFILE = {
    "role": "DOCTOR",
    "specialty": "Neurology",
    "experience": 12,
    "credential_url": "https://example.com/credentials.pdf",
    "description": "Board-certified neurologist with a focus on migraines.",
}


class OnboardingAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="new@example.com", password="NewPass12345")
        self.client.force_authenticate(self.user)
        self.url = reverse("user-onboarding")

    def test_patient_onboarding(self) -> None:
        response = self.client.post(self.url, {"role": "PATIENT"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["role"], User.Role.PATIENT)

    def test_doctor_onboarding_starts_pending(self) -> None:
        response = self.client.post(self.url, DOCTOR_PROFILE, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.Role.DOCTOR)
        self.assertEqual(self.user.verification_status, User.VerificationStatus.PENDING)
        self.assertEqual(self.user.specialty, "Neurology")

    def test_doctor_profile_is_required(self) -> None:
        response = self.client.post(self.url, {"role": "DOCTOR", "specialty": "Neurology"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("description", response.data)

    def test_role_cannot_be_changed_twice(self) -> None:
        self.client.post(self.url, {"role": "PATIENT"}, format="json")

        response = self.client.post(self.url, DOCTOR_PROFILE, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Role has already been assigned.")

    def test_admin_role_cannot_be_chosen(self) -> None:
        response = self.client.post(self.url, {"role": "ADMIN"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_hides_credits_from_writes(self) -> None:
        response = self.client.patch(reverse("user-me"), {"first_name": "Ann", "credits": 500}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["first_name"], "Ann")
        self.assertEqual(response.data["credits"], 0)


class DoctorDirectoryTests(APITestCase):
    def setUp(self) -> None:
        self.verified = User.objects.create_user(
            email="verified@example.com",
            role=User.Role.DOCTOR,
            specialty="Cardiology",
            verification_status=User.VerificationStatus.VERIFIED,
        )
        self.pending = User.objects.create_user(
            email="pending@example.com",
            role=User.Role.DOCTOR,
            specialty="Cardiology",
            verification_status=User.VerificationStatus.PENDING,
        )
        self.admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")

    def _emails(self, response) -> list[str]:
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        return [row["email"] for row in rows]

    def test_directory_lists_verified_doctors_only(self) -> None:
        response = self.client.get(reverse("doctor-list"), {"specialty": "cardiology"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._emails(response), ["verified@example.com"])

    def test_admin_verifies_and_suspends(self) -> None:
        self.client.force_authenticate(self.admin)

        verify = self.client.post(
            reverse("admin-doctor-verify", args=[self.pending.pk]), {"status": "VERIFIED"}, format="json"
        )
        self.assertEqual(verify.status_code, status.HTTP_200_OK, verify.data)

        suspend = self.client.post(
            reverse("admin-doctor-set-active", args=[self.verified.pk]), {"is_active": False}, format="json"
        )
        self.assertEqual(suspend.status_code, status.HTTP_200_OK, suspend.data)

        self.client.force_authenticate(None)
        self.assertEqual(self._emails(self.client.get(reverse("doctor-list"))), ["pending@example.com"])

    def test_verification_requires_admin(self) -> None:
        self.client.force_authenticate(self.verified)
        response = self.client.post(
            reverse("admin-doctor-verify", args=[self.pending.pk]), {"status": "VERIFIED"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@pytest.mark.django_db
def test_resolve_identity():
    patient = User.objects.create_user(email="p@example.com", role=User.Role.PATIENT)
    admin = User.objects.create_superuser(email="a@example.com", password="AdminPass123")

    assert resolve_identity(AnonymousUser()) == ANONYMOUS
    assert resolve_identity(patient).role == User.Role.PATIENT
    assert resolve_identity(patient).user_id == patient.pk
    assert resolve_identity(admin).has_role(User.Role.ADMIN)


@pytest.mark.django_db
def test_external_id_lookup():
    user, created = get_or_create_from_identity("idp_123", "linked@example.com")
    again, created_again = get_or_create_from_identity("idp_123", "linked@example.com")

    assert created and not created_again
    assert again == user
    assert user.role == User.Role.UNASSIGNED
    assert get_user_by_external_id("idp_123") == user
    with pytest.raises(NotFoundError):
        get_user_by_external_id("idp_missing")
