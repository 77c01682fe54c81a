"""API views for patient support messages."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsPatient

from . import services
from .filters import PatientMessageFilterSet
from .models import PatientMessage
from .serializers import (
    PatientMessageCreateSerializer,
    PatientMessageSerializer,
    PatientMessageUpdateSerializer,
)


class PatientMessageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Patients write to support and read their own threads; admins triage all of them."""

    serializer_class = PatientMessageSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"
    filter_backends = [DjangoFilterBackend]
    filterset_class = PatientMessageFilterSet

    def get_queryset(self):  # type: ignore
        qs = PatientMessage.objects.select_related("patient")
        if self.request.user.is_admin():
            return services.triage_queue(qs)
        return qs.filter(patient=self.request.user)

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsPatient()]
        if self.action in ("partial_update", "destroy", "stats"):
            return [IsAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = PatientMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        row = services.create_message(request.user, **serializer.validated_data)
        return Response(PatientMessageSerializer(row).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = PatientMessageUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        row = services.update_message(
            int(pk),
            request.user,
            status=serializer.validated_data.get("status"),
            admin_response=serializer.validated_data.get("admin_response", ""),
        )
        return Response(PatientMessageSerializer(row).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.message_statistics())
