"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .permissions import IsAdmin
from .serializers import (
    ActiveStatusSerializer,
    AdminDoctorSerializer,
    DoctorSerializer,
    OnboardingSerializer,
    UserSerializer,
    VerificationSerializer,
)

User = get_user_model()


class ProfileViewSet(viewsets.GenericViewSet):
    """Current caller's profile and onboarding."""

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["get", "patch"])
    def me(self, request):
        if request.method == "PATCH":
            serializer = UserSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(UserSerializer(request.user).data)

    @action(detail=False, methods=["post"])
    def onboarding(self, request):
        serializer = OnboardingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        role = data.pop("role")
        user = services.onboard(request.user, role, data)
        return Response(UserSerializer(user).data)


class DoctorDirectoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Verified doctors, optionally filtered by ``?specialty=``."""

    serializer_class = DoctorSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):  # type: ignore
        qs = User.objects.verified_doctors().order_by("first_name", "email")
        specialty = self.request.query_params.get("specialty")
        if specialty:
            qs = qs.filter(specialty__iexact=specialty)
        return qs


class AdminDoctorViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Doctor verification console."""

    serializer_class = AdminDoctorSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):  # type: ignore
        qs = User.objects.doctors().order_by("-created_at")
        status_param = self.request.query_params.get("verification_status")
        if status_param:
            qs = qs.filter(verification_status=status_param)
        return qs

    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):  # type: ignore
        serializer = VerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        doctor = services.set_verification_status(self.get_object(), serializer.validated_data["status"])
        return Response(AdminDoctorSerializer(doctor).data)

    @action(detail=True, methods=["post"], url_path="set-active")
    def set_active(self, request, pk=None):  # type: ignore
        serializer = ActiveStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        doctor = services.set_doctor_active(self.get_object(), serializer.validated_data["is_active"])
        return Response(AdminDoctorSerializer(doctor).data)
