"""Admin registration for patient support messages."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import PatientMessage


@admin.register(PatientMessage)
class PatientMessageAdmin(admin.ModelAdmin):
    list_display = ("message_number", "patient", "subject", "message_type", "priority", "status", "created_at")
    list_filter = ("status", "message_type", "priority")
    search_fields = ("message_number", "subject", "patient__email")
    readonly_fields = ("message_number", "responded_at", "created_at", "updated_at")
