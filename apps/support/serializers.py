"""Serializers for patient support messages."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import PatientMessage


class PatientMessageSerializer(serializers.ModelSerializer):
    patient_email = serializers.ReadOnlyField(source="patient.email")

    class Meta:
        model = PatientMessage
        fields = [
            "id",
            "message_number",
            "patient",
            "patient_email",
            "subject",
            "message",
            "message_type",
            "priority",
            "status",
            "admin_response",
            "responded_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PatientMessageCreateSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField()
    message_type = serializers.ChoiceField(
        choices=PatientMessage.MessageType.choices,
        default=PatientMessage.MessageType.GENERAL,
    )
    priority = serializers.ChoiceField(
        choices=PatientMessage.Priority.choices,
        default=PatientMessage.Priority.NORMAL,
    )


class PatientMessageUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PatientMessage.Status.choices, required=False)
    admin_response = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        if not attrs.get("status") and not attrs.get("admin_response"):
            raise serializers.ValidationError("Provide a status or a response.")
        return attrs
