"""Admin registrations for the pharmacy shop."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Medicine, Order, OrderItem


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("name", "generic_name", "brand_name", "price", "stock", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "generic_name", "brand_name")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("medicine", "quantity", "unit_price", "total_price")
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "status", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status")
    search_fields = ("order_number", "customer_name", "customer__email")
    date_hierarchy = "created_at"
    readonly_fields = ("order_number", "subtotal", "total_amount", "created_at", "updated_at")
    inlines = [OrderItemInline]
