"""Admin registrations for cabins."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Cabin, CabinAvailability, CabinBooking


class CabinAvailabilityInline(admin.TabularInline):
    model = CabinAvailability
    extra = 0
    fields = ("start_date", "end_date", "is_active", "reason")


@admin.register(Cabin)
class CabinAdmin(admin.ModelAdmin):
    list_display = ("name", "room_number", "cabin_type", "capacity", "price_per_night", "is_active")
    list_filter = ("cabin_type", "is_active")
    search_fields = ("name", "room_number")
    inlines = [CabinAvailabilityInline]


@admin.register(CabinBooking)
class CabinBookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_number",
        "cabin",
        "patient",
        "check_in_date",
        "check_out_date",
        "status",
        "payment_status",
        "total_amount",
    )
    list_filter = ("status", "payment_status", "cabin")
    search_fields = ("booking_number", "guest_name", "patient__email")
    date_hierarchy = "check_in_date"
    readonly_fields = ("booking_number", "nights", "total_amount", "created_at", "updated_at")
