"""API views for appointments and doctor availability."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsPatient, IsPatientOrDoctor, IsVerifiedDoctor

from . import services
from .application.command_handlers import (
    AddNotesCommand,
    AddNotesHandler,
    BookAppointmentCommand,
    BookAppointmentHandler,
    CancelAppointmentCommand,
    CancelAppointmentHandler,
    CheckInAppointmentCommand,
    CheckInAppointmentHandler,
    CompleteAppointmentCommand,
    CompleteAppointmentHandler,
)
from .models import Appointment, DoctorAvailability
from .serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    CancelSerializer,
    DoctorAvailabilitySerializer,
    NotesSerializer,
    SlotQuerySerializer,
    SlotSerializer,
)

User = get_user_model()


class AppointmentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Appointments of the caller: booked as patient or attended as doctor."""

    queryset = Appointment.objects.select_related("patient", "doctor").all()
    serializer_class = AppointmentSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_admin():
            if user.is_doctor():
                qs = qs.filter(doctor=user)
            else:
                qs = qs.filter(patient=user)
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsPatient()]
        if self.action == "cancel":
            return [IsPatientOrDoctor()]
        if self.action in ("check_in", "complete", "notes"):
            return [IsVerifiedDoctor()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = AppointmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        appointment = BookAppointmentHandler().handle(
            BookAppointmentCommand(
                doctor_id=data["doctor"],
                start_time=data["start_time"],
                end_time=data["end_time"],
                requester=request.user,
                description=data.get("description", ""),
            )
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appointment = CancelAppointmentHandler().handle(
            CancelAppointmentCommand(
                appointment_id=int(pk),
                caller=request.user,
                reason=serializer.validated_data.get("reason", ""),
            )
        )
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        appointment = CheckInAppointmentHandler().handle(
            CheckInAppointmentCommand(appointment_id=int(pk), caller=request.user)
        )
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        appointment = CompleteAppointmentHandler().handle(
            CompleteAppointmentCommand(appointment_id=int(pk), caller=request.user)
        )
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=True, methods=["post"])
    def notes(self, request, pk=None):  # type: ignore
        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appointment = AddNotesHandler().handle(
            AddNotesCommand(appointment_id=int(pk), caller=request.user, notes=serializer.validated_data["notes"])
        )
        return Response(AppointmentSerializer(appointment).data)

    @action(detail=False, methods=["get"])
    def slots(self, request):
        """Free slots of ``?doctor=<id>`` over the next ``?days=`` days (default 7).

        A doctor without availability periods accepts bookings at any time:
        the response then carries ``has_restrictions: false`` and ``slots: null``.
        An empty ``slots`` list means the doctor is fully booked.
        """
        query = SlotQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        doctor = get_object_or_404(User.objects.verified_doctors(), pk=query.validated_data["doctor"])
        slots = services.available_slots(doctor, query.validated_data["days"])
        return Response(
            {
                "has_restrictions": slots is not None,
                "slots": None if slots is None else SlotSerializer(slots, many=True).data,
            }
        )


class DoctorAvailabilityViewSet(viewsets.ModelViewSet):
    """A doctor's own availability periods."""

    serializer_class = DoctorAvailabilitySerializer
    permission_classes = [IsVerifiedDoctor]

    def get_queryset(self):  # type: ignore
        return DoctorAvailability.objects.filter(doctor=self.request.user)

    def perform_create(self, serializer):  # type: ignore
        data = serializer.validated_data
        serializer.instance = services.create_availability(
            self.request.user,
            data["start"],
            data["end"],
            data.get("reason", ""),
        )

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.update_availability(serializer.instance, **serializer.validated_data)
