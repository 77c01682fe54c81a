"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "external_id")}),
        (_("Personal info"), {"fields": ("username", "first_name", "last_name")}),
        (_("Role and credits"), {"fields": ("role", "plan", "credits")}),
        (
            _("Doctor profile"),
            {
                "fields": (
                    "specialty",
                    "experience",
                    "credential_url",
                    "description",
                    "verification_status",
                )
            },
        ),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "role", "is_staff", "is_superuser"),
            },
        ),
    )
    list_display = ("email", "role", "credits", "verification_status", "is_active", "is_staff")
    list_filter = ("role", "verification_status", "plan", "is_active", "is_staff")
    search_fields = ("email", "external_id", "first_name", "last_name", "specialty")
    ordering = ("email",)
    # The balance is a projection of the ledger and is never edited by hand.
    readonly_fields = ("credits", "created_at", "updated_at", "date_joined")
