"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AdminDoctorViewSet, DoctorDirectoryViewSet, ProfileViewSet

router = SimpleRouter()
router.register(r'doctors', DoctorDirectoryViewSet, basename='doctor')
router.register(r'admin/doctors', AdminDoctorViewSet, basename='admin-doctor')
router.register(r'', ProfileViewSet, basename='user')

urlpatterns = [
    path('', include(router.urls)),
]
