"""URL routing for patient support messages."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PatientMessageViewSet

router = SimpleRouter()
router.register(r"", PatientMessageViewSet, basename="patient-message")

urlpatterns = [
    path("", include(router.urls)),
]
