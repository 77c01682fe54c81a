"""Integration tests for the patient messages endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.support.models import PatientMessage
from apps.users.models import User


class PatientMessageAPITests(APITestCase):
    def setUp(self) -> None:
        self.patient = User.objects.create_user(
            email="patient@example.com",
            password="PatientPass123",
            role=User.Role.PATIENT,
        )
        self.admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")

    @staticmethod
    def _rows(response):
        return response.data["results"] if isinstance(response.data, dict) else response.data

    def _create(self, **overrides):
        payload = {"subject": "Rash", "message": "The rash is spreading.", "priority": "HIGH"}
        payload.update(overrides)
        self.client.force_authenticate(self.patient)
        return self.client.post(reverse("patient-message-list"), payload, format="json")

    def test_patient_writes_and_reads_own_messages(self) -> None:
        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["message_number"].startswith("MSG-"))
        self.assertEqual(response.data["status"], PatientMessage.Status.PENDING)

        other = User.objects.create_user(email="other@example.com", role=User.Role.PATIENT)
        self.client.force_authenticate(other)
        self.assertEqual(self._rows(self.client.get(reverse("patient-message-list"))), [])

        self.client.force_authenticate(self.patient)
        self.assertEqual(len(self._rows(self.client.get(reverse("patient-message-list")))), 1)

    def test_doctor_cannot_write(self) -> None:
        doctor = User.objects.create_user(email="doctor@example.com", role=User.Role.DOCTOR)
        self.client.force_authenticate(doctor)

        response = self.client.post(
            reverse("patient-message-list"), {"subject": "Hi", "message": "Hello"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_answers_filters_and_counts(self) -> None:
        message_id = self._create().data["id"]
        self._create(priority="URGENT", message_type="PRESCRIPTION")

        forbidden = self.client.patch(
            reverse("patient-message-detail", args=[message_id]), {"status": "CLOSED"}, format="json"
        )
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        answered = self.client.patch(
            reverse("patient-message-detail", args=[message_id]),
            {"admin_response": "Please book an appointment."},
            format="json",
        )
        self.assertEqual(answered.status_code, status.HTTP_200_OK, answered.data)
        self.assertEqual(answered.data["status"], PatientMessage.Status.RESPONDED)

        empty = self.client.patch(reverse("patient-message-detail", args=[message_id]), {}, format="json")
        self.assertEqual(empty.status_code, status.HTTP_400_BAD_REQUEST)

        pending = self.client.get(reverse("patient-message-list"), {"status": "PENDING"})
        self.assertEqual(len(self._rows(pending)), 1)
        self.assertEqual(self._rows(pending)[0]["priority"], "URGENT")

        stats = self.client.get(reverse("patient-message-stats"))
        self.assertEqual(stats.data["total_messages"], 2)
        self.assertEqual(stats.data["urgent_messages"], 1)
        self.assertEqual(stats.data["prescription_messages"], 1)

        deleted = self.client.delete(reverse("patient-message-detail", args=[message_id]))
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PatientMessage.objects.filter(pk=message_id).exists())
