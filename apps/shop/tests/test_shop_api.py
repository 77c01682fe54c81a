"""Integration tests for the pharmacy shop endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.shop.models import Medicine, Order
from apps.users.models import User


class ShopAPITests(APITestCase):
    def setUp(self) -> None:
        self.patient = User.objects.create_user(
            email="patient@example.com",
            password="PatientPass123",
            role=User.Role.PATIENT,
        )
        self.admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")
        self.medicine = Medicine.objects.create(
            name="Amoxicillin 250mg",
            generic_name="Amoxicillin",
            brand_name="Amoxil",
            price=Decimal("12.99"),
            stock=5,
        )
        self.sold_out = Medicine.objects.create(
            name="Omeprazole 20mg",
            generic_name="Omeprazole",
            brand_name="Prilosec",
            price=Decimal("15.75"),
            stock=0,
        )

    def _order_payload(self, quantity: int = 2) -> dict:
        return {
            "items": [{"medicine": self.medicine.pk, "quantity": quantity}],
            "shipping_address": "1 Main St",
            "shipping_city": "Springfield",
            "shipping_cost": "3.00",
        }

    @staticmethod
    def _rows(response):
        return response.data["results"] if isinstance(response.data, dict) else response.data

    def test_public_catalogue_lists_only_stocked_medicines(self) -> None:
        response = self.client.get(reverse("medicine-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in self._rows(response)], [self.medicine.pk])

        search = self.client.get(reverse("medicine-list"), {"search": "amoxil"})
        self.assertEqual(len(self._rows(search)), 1)

    def test_only_admin_manages_medicines(self) -> None:
        payload = {
            "name": "Metformin 500mg",
            "generic_name": "Metformin",
            "brand_name": "Glucophage",
            "price": "18.25",
            "stock": 40,
        }
        self.client.force_authenticate(self.patient)
        self.assertEqual(
            self.client.post(reverse("medicine-list"), payload, format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )

        self.client.force_authenticate(self.admin)
        created = self.client.post(reverse("medicine-list"), payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        restocked = self.client.post(
            reverse("medicine-restock", args=[self.sold_out.pk]), {"quantity": 7}, format="json"
        )
        self.assertEqual(restocked.status_code, status.HTTP_200_OK, restocked.data)
        self.assertEqual(restocked.data["stock"], 7)

        free = self.client.post(reverse("medicine-list"), {**payload, "price": "0"}, format="json")
        self.assertEqual(free.status_code, status.HTTP_400_BAD_REQUEST)

    def test_place_and_cancel_order(self) -> None:
        self.client.force_authenticate(self.patient)
        response = self.client.post(reverse("order-list"), self._order_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_amount"], "28.98")
        self.assertEqual(len(response.data["items"]), 1)
        self.medicine.refresh_from_db()
        self.assertEqual(self.medicine.stock, 3)

        cancel = self.client.post(
            reverse("order-cancel", args=[response.data["id"]]), {"reason": "Wrong dose"}, format="json"
        )
        self.assertEqual(cancel.status_code, status.HTTP_200_OK, cancel.data)
        self.assertEqual(cancel.data["status"], Order.Status.CANCELLED)
        self.medicine.refresh_from_db()
        self.assertEqual(self.medicine.stock, 5)

    def test_order_beyond_stock_returns_400(self) -> None:
        self.client.force_authenticate(self.patient)
        response = self.client.post(reverse("order-list"), self._order_payload(quantity=6), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("detail", response.data)

    def test_orders_are_scoped_and_guarded(self) -> None:
        self.client.force_authenticate(self.patient)
        order_id = self.client.post(reverse("order-list"), self._order_payload(1), format="json").data["id"]

        stranger = User.objects.create_user(email="stranger@example.com", role=User.Role.PATIENT)
        self.client.force_authenticate(stranger)
        self.assertEqual(self._rows(self.client.get(reverse("order-list"))), [])
        self.assertEqual(
            self.client.post(reverse("order-cancel", args=[order_id]), {}, format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.assertEqual(
            self.client.post(reverse("order-set-status", args=[order_id]), {"status": "CONFIRMED"}).status_code,
            status.HTTP_403_FORBIDDEN,
        )

    def test_admin_order_console(self) -> None:
        self.client.force_authenticate(self.patient)
        order_id = self.client.post(reverse("order-list"), self._order_payload(1), format="json").data["id"]

        self.client.force_authenticate(self.admin)
        self.assertEqual(len(self._rows(self.client.get(reverse("order-list")))), 1)

        confirmed = self.client.post(
            reverse("order-set-status", args=[order_id]), {"status": "CONFIRMED"}, format="json"
        )
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK, confirmed.data)
        self.assertEqual(confirmed.data["payment_status"], Order.PaymentStatus.PAID)

        skipped = self.client.post(
            reverse("order-set-status", args=[order_id]), {"status": "DELIVERED"}, format="json"
        )
        self.assertEqual(skipped.status_code, status.HTTP_400_BAD_REQUEST)

        stats = self.client.get(reverse("order-stats"))
        self.assertEqual(stats.data["total"], 1)
        self.assertEqual(stats.data["revenue"], Decimal("15.99"))

    def test_non_numeric_order_id_is_not_found(self) -> None:
        self.client.force_authenticate(self.patient)
        response = self.client.post("/api/v1/shop/orders/abc/cancel/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
