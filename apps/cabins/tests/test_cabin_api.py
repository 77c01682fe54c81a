"""Integration tests for cabin endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.cabins.models import Cabin, CabinAvailability, CabinBooking
from apps.users.models import User


class CabinAPITests(APITestCase):
    def setUp(self) -> None:
        self.patient = User.objects.create_user(
            email="patient@example.com",
            password="PatientPass123",
            role=User.Role.PATIENT,
        )
        self.admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")
        self.cabin = Cabin.objects.create(
            name="Garden suite",
            cabin_type=Cabin.CabinType.SUITE,
            room_number="101",
            capacity=2,
            price_per_night=Decimal("150.00"),
            amenities=["wifi"],
        )
        self.today = timezone.localdate()

    def _day(self, offset: int) -> str:
        return str(self.today + timedelta(days=offset))

    def _payload(self, check_in: int, check_out: int) -> dict:
        return {
            "cabin": self.cabin.pk,
            "check_in_date": self._day(check_in),
            "check_out_date": self._day(check_out),
            "guest_name": "Jane Doe",
            "guests_count": 2,
        }

    def test_public_list_and_filters(self) -> None:
        Cabin.objects.create(
            name="Closed room",
            room_number="102",
            capacity=1,
            price_per_night=Decimal("90.00"),
            is_active=False,
        )

        response = self.client.get(reverse("cabin-list"), {"cabin_type": "SUITE"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([row["room_number"] for row in rows], ["101"])

    def test_only_admin_creates_cabins(self) -> None:
        payload = {"name": "New", "room_number": "201", "capacity": 1, "price_per_night": "80.00"}
        self.client.force_authenticate(self.patient)
        self.assertEqual(self.client.post(reverse("cabin-list"), payload, format="json").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse("cabin-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_booking_and_conflict(self) -> None:
        self.client.force_authenticate(self.patient)
        url = reverse("cabin-booking-list")

        created = self.client.post(url, self._payload(3, 6), format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        self.assertEqual(created.data["nights"], 3)
        self.assertEqual(created.data["total_amount"], "450.00")

        conflict = self.client.post(url, self._payload(5, 7), format="json")
        self.assertEqual(conflict.status_code, status.HTTP_400_BAD_REQUEST, conflict.data)

        check = self.client.get(
            reverse("cabin-availability", args=[self.cabin.pk]),
            {"check_in": self._day(5), "check_out": self._day(7)},
        )
        self.assertEqual(check.data, {"available": False, "reason": "already booked"})

    def test_cancel_own_booking(self) -> None:
        self.client.force_authenticate(self.patient)
        created = self.client.post(reverse("cabin-booking-list"), self._payload(3, 6), format="json")

        response = self.client.post(
            reverse("cabin-booking-cancel", args=[created.data["id"]]), {"reason": "Recovered"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], CabinBooking.Status.CANCELLED)

    def test_admin_manages_periods_and_calendar(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("cabin-availability-list", args=[self.cabin.pk])

        created = self.client.post(url, {"start_date": self._day(1), "end_date": self._day(10)}, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        overlap = self.client.post(url, {"start_date": self._day(5), "end_date": self._day(12)}, format="json")
        self.assertEqual(overlap.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(CabinAvailability.objects.count(), 1)

        ranges = self.client.get(reverse("cabin-free-ranges", args=[self.cabin.pk]))
        self.assertTrue(ranges.data["has_restrictions"])
        self.assertEqual(
            ranges.data["available_ranges"],
            [{"start_date": self._day(1), "end_date": self._day(10)}],
        )

        disabled = self.client.get(reverse("cabin-disabled-dates", args=[self.cabin.pk]))
        self.assertIn(self._day(0), disabled.data["disabled_dates"])
        self.assertNotIn(self._day(4), disabled.data["disabled_dates"])

        self.client.force_authenticate(self.patient)
        self.assertEqual(self.client.post(url, {}, format="json").status_code, 403)

    def test_admin_booking_console(self) -> None:
        self.client.force_authenticate(self.patient)
        created = self.client.post(reverse("cabin-booking-list"), self._payload(1, 2), format="json")
        booking_id = created.data["id"]

        self.assertEqual(self.client.get(reverse("cabin-booking-stats")).status_code, 403)

        self.client.force_authenticate(self.admin)
        moved = self.client.post(
            reverse("cabin-booking-set-status", args=[booking_id]), {"status": "CHECKED_IN"}, format="json"
        )
        self.assertEqual(moved.status_code, status.HTTP_200_OK, moved.data)
        paid = self.client.post(
            reverse("cabin-booking-payment", args=[booking_id]),
            {"payment_status": "PAID", "paid_amount": "150.00"},
            format="json",
        )
        self.assertEqual(paid.data["payment_status"], "PAID")

        stats = self.client.get(reverse("cabin-booking-stats"))
        self.assertEqual(stats.data["checked_in"], 1)
        self.assertEqual(stats.data["revenue"], Decimal("150.00"))

    def test_search_available_cabins(self) -> None:
        self.client.force_authenticate(self.patient)
        self.client.post(reverse("cabin-booking-list"), self._payload(3, 6), format="json")

        busy = self.client.get(reverse("cabin-available"), {"check_in": self._day(4), "check_out": self._day(5)})
        free = self.client.get(reverse("cabin-available"), {"check_in": self._day(6), "check_out": self._day(8)})

        self.assertEqual(busy.data, [])
        self.assertEqual(len(free.data), 1)

    def test_non_numeric_booking_id_is_not_found(self) -> None:
        self.client.force_authenticate(self.patient)
        cancel = self.client.post("/api/v1/cabins/bookings/abc/cancel/", {}, format="json")
        self.assertEqual(cancel.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.admin)
        set_status = self.client.post(
            "/api/v1/cabins/bookings/abc/status/", {"status": "CHECKED_IN"}, format="json"
        )
        payment = self.client.post(
            "/api/v1/cabins/bookings/abc/payment/", {"payment_status": "PAID"}, format="json"
        )
        self.assertEqual(set_status.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(payment.status_code, status.HTTP_404_NOT_FOUND)
