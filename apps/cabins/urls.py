"""URL routing for the cabins domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import CabinAvailabilityViewSet, CabinBookingViewSet, CabinViewSet

router = SimpleRouter()
router.register(r"bookings", CabinBookingViewSet, basename="cabin-booking")
router.register(r"", CabinViewSet, basename="cabin")

availability_list = CabinAvailabilityViewSet.as_view({"get": "list", "post": "create"})
availability_detail = CabinAvailabilityViewSet.as_view(
    {"patch": "partial_update", "put": "update", "delete": "destroy", "get": "retrieve"}
)

urlpatterns = [
    path(
        "<int:cabin_id>/periods/",
        availability_list,
        name="cabin-availability-list",
    ),
    path(
        "<int:cabin_id>/periods/<int:pk>/",
        availability_detail,
        name="cabin-availability-detail",
    ),
    path("", include(router.urls)),
]
