"""Admin registrations for the ledger. Entries are read-only."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import CreditTransaction, Payout


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "amount", "type", "package_id", "appointment", "created_at")
    list_filter = ("type", "package_id")
    search_fields = ("user__email",)
    readonly_fields = ("user", "amount", "type", "package_id", "appointment", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "doctor", "credits", "net_amount", "status", "created_at", "processed_at")
    list_filter = ("status",)
    search_fields = ("doctor__email", "paypal_email")
    readonly_fields = (
        "doctor",
        "credits",
        "amount",
        "platform_fee",
        "net_amount",
        "processed_at",
        "processed_by",
        "created_at",
        "updated_at",
    )
