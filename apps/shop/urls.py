"""URL routing for the pharmacy shop."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import MedicineViewSet, OrderViewSet

router = SimpleRouter()
router.register(r"medicines", MedicineViewSet, basename="medicine")
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
]
