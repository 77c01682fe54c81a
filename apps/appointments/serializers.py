"""Serializers for the appointments API."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Appointment, DoctorAvailability

User = get_user_model()


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.ReadOnlyField(source="patient.display_name")
    doctor_name = serializers.ReadOnlyField(source="doctor.display_name")
    doctor_specialty = serializers.ReadOnlyField(source="doctor.specialty")

    class Meta:
        model = Appointment
        fields = [
            "id",
            "patient",
            "patient_name",
            "doctor",
            "doctor_name",
            "doctor_specialty",
            "start_time",
            "end_time",
            "status",
            "description",
            "notes",
            "credits_charged",
            "checked_in_at",
            "cancelled_at",
            "cancellation_reason",
            "completed_at",
            "created_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    """Booking request. Availability and credits are checked by the handler."""

    doctor = serializers.IntegerField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    description = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate(self, attrs):  # type: ignore
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError("End time must be after start time.")
        return attrs


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class NotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class DoctorAvailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = DoctorAvailability
        fields = ["id", "start", "end", "is_active", "reason", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start", getattr(self.instance, "start", None))
        end = attrs.get("end", getattr(self.instance, "end", None))
        if start and end and start >= end:
            raise serializers.ValidationError("End must be after start.")
        return attrs


class SlotSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField(source="start")
    end_time = serializers.DateTimeField(source="end")


class SlotQuerySerializer(serializers.Serializer):
    doctor = serializers.IntegerField(min_value=1)
    days = serializers.IntegerField(min_value=1, max_value=90, default=7)
