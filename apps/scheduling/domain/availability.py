"""
Availability Engine

Pure functions deciding whether a resource (a doctor's time or a cabin)
can be booked for an interval, and which sub-ranges of its availability
periods are still free.

Rules:
1. Availability periods are an allow-list. A resource without active
   periods is unrestricted; otherwise a request must fit completely inside
   one active period.
2. Only CONFIRMED and CHECKED_IN bookings block time.
3. A request conflicts with a booking when it starts during it, ends
   during it, or fully contains it. Back-to-back intervals do not conflict.

Nothing here touches the database; ``apps.scheduling.services`` feeds the
engine from concrete models.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Hashable, Iterable, List, Optional, Sequence

from shared.domain.value_objects import Bound, Interval

OUTSIDE_AVAILABLE_PERIODS = "outside available periods"
ALREADY_BOOKED = "already booked"

DAY = timedelta(days=1)
EXACT = timedelta(0)


class BookingStatus(str, Enum):
    """
    Booking lifecycle

    - CONFIRMED: created by a successful booking request
    - CHECKED_IN: the patient has arrived
    - CANCELLED: cancelled explicitly (credits refunded for appointments)
    - COMPLETED: the end time has passed
    """
    CONFIRMED = 'CONFIRMED'
    CHECKED_IN = 'CHECKED_IN'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'


BLOCKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})


@dataclass(frozen=True)
class Reservation:
    """An existing booking of a resource."""
    resource_id: Hashable
    interval: Interval
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def blocks(self) -> bool:
        return BookingStatus(self.status) in BLOCKING_STATUSES


@dataclass(frozen=True)
class AvailabilityPeriod:
    """A window inside which a resource may be booked."""
    resource_id: Hashable
    interval: Interval
    active: bool = True
    reason: str = ''


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: Optional[str] = None
    conflict: Optional[Reservation] = None

    def __bool__(self):
        return self.available


def overlaps(first: Interval, second: Interval) -> bool:
    """Three-way overlap test between two intervals."""
    return first.overlaps_with(second)


def _of_resource(items: Iterable, resource_id: Hashable) -> list:
    if resource_id is None:
        return list(items)
    return [item for item in items if item.resource_id == resource_id]


def blocking(bookings: Iterable[Reservation]) -> List[Reservation]:
    return [booking for booking in bookings if booking.blocks]


def active(periods: Iterable[AvailabilityPeriod]) -> List[AvailabilityPeriod]:
    return [period for period in periods if period.active]


def first_conflict(requested: Interval, bookings: Iterable[Reservation]) -> Optional[Reservation]:
    """Return the earliest blocking booking overlapping ``requested``."""
    conflicts = [b for b in blocking(bookings) if overlaps(requested, b.interval)]
    if not conflicts:
        return None
    return min(conflicts, key=lambda b: b.interval.start)


def is_available(
    resource_id: Hashable,
    requested: Interval,
    bookings: Sequence[Reservation],
    periods: Sequence[AvailabilityPeriod] = (),
) -> AvailabilityResult:
    """
    Decide whether ``requested`` can be booked on ``resource_id``

    Bookings and periods of other resources are ignored. The result is
    binary; ``reason`` says why a request was rejected.
    """
    windows = active(_of_resource(periods, resource_id))
    if windows and not any(window.interval.covers(requested) for window in windows):
        return AvailabilityResult(False, OUTSIDE_AVAILABLE_PERIODS)

    conflict = first_conflict(requested, _of_resource(bookings, resource_id))
    if conflict is not None:
        return AvailabilityResult(False, ALREADY_BOOKED, conflict)

    return AvailabilityResult(True)


def _append_range(ranges: List[Interval], start: Bound, end: Bound) -> None:
    # Degenerate ranges appear when bookings sit back to back or touch a
    # period edge.
    if start < end:
        ranges.append(Interval(start, end))


def free_ranges(
    periods: Sequence[AvailabilityPeriod],
    bookings: Sequence[Reservation],
    step: timedelta = DAY,
) -> List[Interval]:
    """
    Subtract blocking bookings from every active period

    ``step`` is the calendar granularity. With the default of one day the
    range before a booking ends the day before it starts and the next
    range begins the day after it ends, so that period [Jan 1, Jan 31]
    with booking [Jan 10, Jan 15] yields [Jan 1, Jan 9] and [Jan 16, Jan 31].
    ``EXACT`` performs plain half-open subtraction (appointment slots).

    Ranges with start >= end are never returned.
    """
    taken = sorted(blocking(bookings), key=lambda b: b.interval.start)
    ranges: List[Interval] = []

    for period in sorted(active(periods), key=lambda p: p.interval.start):
        window = period.interval
        current = window.start

        for booking in taken:
            if not overlaps(booking.interval, window):
                continue
            if current < booking.interval.start:
                _append_range(ranges, current, booking.interval.start - step)
            current = max(current, booking.interval.end + step)

        _append_range(ranges, current, window.end)

    return ranges


def split_into_slots(
    ranges: Iterable[Interval],
    length: timedelta,
    *,
    not_before: Optional[Bound] = None,
) -> List[Interval]:
    """Cut free ranges into consecutive slots of ``length``."""
    if length <= timedelta(0):
        raise ValueError("Slot length must be positive")

    slots: List[Interval] = []
    for free in ranges:
        slot_start = free.start
        while slot_start + length <= free.end:
            if not_before is None or slot_start >= not_before:
                slots.append(Interval(slot_start, slot_start + length))
            slot_start += length
    return slots
