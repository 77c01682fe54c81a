"""Interval conflict service shared by appointments and cabins.

``ResourceSchedule`` binds the availability engine to one pair of models:
a booking model (subclass of ``ReservationRecord``) and a period model
(subclass of ``AvailabilityWindowRecord``), both pointing at the resource
through ``resource_field``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, List, Optional

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import BookingConflictError, DomainValidationError
from shared.domain.value_objects import Bound, Interval

from .domain import availability as engine
from .domain.availability import AvailabilityPeriod, AvailabilityResult, Reservation

logger = logging.getLogger(__name__)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class ResourceSchedule:
    """Availability rules for one kind of bookable resource."""

    def __init__(
        self,
        *,
        booking_model,
        period_model,
        resource_field: str,
        label: str,
        step: timedelta = engine.DAY,
    ) -> None:
        self.booking_model = booking_model
        self.period_model = period_model
        self.resource_field = resource_field
        self.label = label
        self.step = step

    # --- queries ----------------------------------------------------------
    def _overlap_filter(self, model, interval: Interval) -> Q:
        # Same rows as the three-way test; the engine re-checks in Python.
        return Q(**{f"{model.interval_start_field}__lt": interval.end}) & Q(
            **{f"{model.interval_end_field}__gt": interval.start}
        )

    def _resource_id(self, obj) -> Any:
        return getattr(obj, f"{self.resource_field}_id")

    def bookings(
        self,
        resource,
        *,
        window: Optional[Interval] = None,
        since: Optional[Bound] = None,
        exclude_id=None,
        lock: bool = False,
    ) -> List[Reservation]:
        model = self.booking_model
        queryset = model.objects.filter(
            **{self.resource_field: resource},
            status__in=[status.value for status in engine.BLOCKING_STATUSES],
        )
        if window is not None:
            queryset = queryset.filter(self._overlap_filter(model, window))
        if since is not None:
            queryset = queryset.filter(**{f"{model.interval_end_field}__gte": since})
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)

        return [
            Reservation(self._resource_id(row), row.interval, engine.BookingStatus(row.status))
            for row in queryset.order_by(model.interval_start_field)
        ]

    def periods(self, resource, *, since: Optional[Bound] = None) -> List[AvailabilityPeriod]:
        model = self.period_model
        queryset = model.objects.filter(**{self.resource_field: resource}, is_active=True)
        if since is not None:
            queryset = queryset.filter(**{f"{model.interval_end_field}__gte": since})
        return [
            AvailabilityPeriod(self._resource_id(row), row.interval, row.is_active, row.reason)
            for row in queryset.order_by(model.interval_start_field)
        ]

    # --- decisions --------------------------------------------------------
    def check(self, resource, interval: Interval, *, exclude_id=None, lock: bool = False) -> AvailabilityResult:
        resource_id = getattr(resource, "pk", resource)
        return engine.is_available(
            resource_id,
            interval,
            self.bookings(resource, window=interval, exclude_id=exclude_id, lock=lock),
            self.periods(resource),
        )

    def ensure_available(self, resource, interval: Interval, *, exclude_id=None) -> None:
        """Raise ``BookingConflictError`` unless ``interval`` is bookable."""
        result = self.check(resource, interval, exclude_id=exclude_id, lock=True)
        if not result:
            logger.warning(
                f"{self.label} {getattr(resource, 'pk', resource)} rejected {interval}: {result.reason}"
            )
            raise BookingConflictError(f"{self.label} is not available for the selected time: {result.reason}.")

    def free_ranges(self, resource, *, since: Optional[Bound] = None) -> Optional[List[Interval]]:
        """
        Free calendar ranges of a resource

        Returns ``None`` when the resource has no active periods, meaning
        bookings are not restricted to any window.
        """
        periods = self.periods(resource, since=since)
        if not periods:
            return None
        return engine.free_ranges(periods, self.bookings(resource, since=since), step=self.step)

    def ensure_period_does_not_overlap(self, resource, interval: Interval, *, exclude_id=None) -> None:
        model = self.period_model
        queryset = model.objects.filter(
            **{self.resource_field: resource},
            is_active=True,
        ).filter(self._overlap_filter(model, interval))
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        if queryset.exists():
            raise DomainValidationError("This range overlaps with an existing availability period.")
