"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile of the calling user."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "role",
            "credits",
            "plan",
            "specialty",
            "experience",
            "credential_url",
            "description",
            "verification_status",
            "created_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "credits",
            "plan",
            "verification_status",
            "created_at",
        ]


class OnboardingSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[User.Role.PATIENT, User.Role.DOCTOR])
    specialty = serializers.CharField(required=False, max_length=100)
    experience = serializers.IntegerField(required=False, min_value=1, max_value=70)
    credential_url = serializers.URLField(required=False)
    description = serializers.CharField(required=False, min_length=20, max_length=1000)

    def validate(self, attrs):  # type: ignore
        if attrs["role"] == User.Role.DOCTOR:
            missing = [
                name
                for name in ("specialty", "experience", "credential_url", "description")
                if not attrs.get(name)
            ]
            if missing:
                raise serializers.ValidationError(
                    {name: "This field is required for doctors." for name in missing}
                )
        return attrs


class DoctorSerializer(serializers.ModelSerializer):
    """Public doctor card."""

    name = serializers.ReadOnlyField(source="display_name")

    class Meta:
        model = User
        fields = ["id", "name", "email", "specialty", "experience", "description"]


class AdminDoctorSerializer(serializers.ModelSerializer):
    name = serializers.ReadOnlyField(source="display_name")

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "specialty",
            "experience",
            "credential_url",
            "description",
            "verification_status",
            "is_active",
            "credits",
            "created_at",
        ]
        read_only_fields = fields


class VerificationSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.VerificationStatus.choices)


class ActiveStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()
