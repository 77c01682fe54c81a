"""FilterSet for the admin message console."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import PatientMessage


class PatientMessageFilterSet(django_filters.FilterSet):
    class Meta:
        model = PatientMessage
        fields = ["status", "message_type", "priority"]
