"""Serializers for the credit ledger API."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import CreditTransaction, Payout
from .services import plan_credits


class CreditTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CreditTransaction
        fields = ["id", "amount", "type", "package_id", "appointment", "created_at"]
        read_only_fields = fields


class AllocationSerializer(serializers.Serializer):
    plan = serializers.CharField(required=False)

    def validate_plan(self, value: str) -> str:
        if value not in plan_credits():
            raise serializers.ValidationError(f"Unknown plan {value}.")
        return value


class PayoutRequestSerializer(serializers.Serializer):
    paypal_email = serializers.EmailField()


class PayoutSerializer(serializers.ModelSerializer):
    doctor_email = serializers.ReadOnlyField(source="doctor.email")

    class Meta:
        model = Payout
        fields = [
            "id",
            "doctor",
            "doctor_email",
            "credits",
            "amount",
            "platform_fee",
            "net_amount",
            "paypal_email",
            "status",
            "created_at",
            "processed_at",
            "processed_by",
        ]
        read_only_fields = fields


class EarningsSerializer(serializers.Serializer):
    credits = serializers.IntegerField()
    gross_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    platform_fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    net_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    completed_appointments = serializers.IntegerField()
    completed_this_month = serializers.IntegerField()
    pending_payout_id = serializers.IntegerField(allow_null=True)


class BalanceSerializer(serializers.Serializer):
    credits = serializers.IntegerField()
    plan = serializers.CharField()
    appointment_cost = serializers.SerializerMethodField()

    def get_appointment_cost(self, obj) -> int:
        return getattr(settings, "APPOINTMENT_CREDIT_COST", 2)
