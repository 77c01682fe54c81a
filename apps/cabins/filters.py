"""FilterSet definitions for cabin listing and search."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Cabin, CabinBooking


class CabinFilterSet(django_filters.FilterSet):
    cabin_type = django_filters.ChoiceFilter(field_name="cabin_type", choices=Cabin.CabinType.choices)
    capacity = django_filters.NumberFilter(field_name="capacity", lookup_expr="gte")
    price_min = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")

    class Meta:
        model = Cabin
        fields = ["cabin_type", "is_active"]


class CabinBookingFilterSet(django_filters.FilterSet):
    """Admin booking list filters."""

    check_in_from = django_filters.DateFilter(field_name="check_in_date", lookup_expr="gte")
    check_in_to = django_filters.DateFilter(field_name="check_in_date", lookup_expr="lte")

    class Meta:
        model = CabinBooking
        fields = ["status", "payment_status", "cabin"]
