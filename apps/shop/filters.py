"""FilterSet definitions for the medicine catalogue and order console."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Medicine, Order


class MedicineFilterSet(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Medicine
        fields = ["is_active"]

    def filter_search(self, queryset, name, value):  # type: ignore
        return queryset.filter(
            Q(name__icontains=value) | Q(generic_name__icontains=value) | Q(brand_name__icontains=value)
        )


class OrderFilterSet(django_filters.FilterSet):
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["status", "payment_status"]
