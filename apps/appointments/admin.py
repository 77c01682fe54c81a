"""Admin registrations for appointments."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Appointment, DoctorAvailability


@admin.register(DoctorAvailability)
class DoctorAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("id", "doctor", "start", "end", "is_active")
    list_filter = ("is_active",)
    search_fields = ("doctor__email",)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "doctor", "start_time", "end_time", "status", "credits_charged")
    list_filter = ("status",)
    search_fields = ("patient__email", "doctor__email")
    date_hierarchy = "start_time"
    readonly_fields = ("credits_charged", "created_at", "updated_at")
