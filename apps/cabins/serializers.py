"""Serializers for the cabins API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Cabin, CabinAvailability, CabinBooking


class CabinSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cabin
        fields = [
            "id",
            "name",
            "description",
            "cabin_type",
            "room_number",
            "floor",
            "wing",
            "capacity",
            "price_per_night",
            "amenities",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate_amenities(self, value):  # type: ignore
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value


class CabinAvailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = CabinAvailability
        fields = ["id", "cabin", "start_date", "end_date", "is_active", "reason", "created_at"]
        read_only_fields = ["id", "cabin", "created_at"]

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start >= end:
            raise serializers.ValidationError("End date must be after start date.")
        return attrs


class CabinBookingSerializer(serializers.ModelSerializer):
    cabin_name = serializers.ReadOnlyField(source="cabin.name")
    room_number = serializers.ReadOnlyField(source="cabin.room_number")

    class Meta:
        model = CabinBooking
        fields = [
            "id",
            "booking_number",
            "cabin",
            "cabin_name",
            "room_number",
            "patient",
            "check_in_date",
            "check_out_date",
            "nights",
            "guest_name",
            "guest_phone",
            "guest_email",
            "guests_count",
            "special_requests",
            "total_amount",
            "payment_status",
            "payment_method",
            "paid_amount",
            "paid_at",
            "status",
            "notes",
            "checked_in_at",
            "cancelled_at",
            "completed_at",
            "created_at",
        ]
        read_only_fields = fields


class CabinBookingCreateSerializer(serializers.Serializer):
    cabin = serializers.IntegerField()
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    guest_name = serializers.CharField(max_length=255)
    guest_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    guest_email = serializers.EmailField(required=False, allow_blank=True)
    guests_count = serializers.IntegerField(min_value=1, default=1)
    special_requests = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in_date"] >= attrs["check_out_date"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CabinBooking.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=CabinBooking.PaymentStatus.choices)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(source="start")
    end_date = serializers.DateField(source="end")
