"""
Common Value Objects

- Interval: a half-open range of dates or datetimes used for bookings,
  availability periods and free calendar ranges.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidIntervalError

Bound = Union[date, datetime]


@dataclass(frozen=True)
class Interval(ValueObject):
    """
    Interval value object

    Represents the half-open range [start, end). Both bounds must be of the
    same kind (two dates or two datetimes) and start must be before end.
    """
    start: Bound
    end: Bound

    def __post_init__(self):
        if isinstance(self.start, datetime) != isinstance(self.end, datetime):
            raise InvalidIntervalError("Interval bounds must both be dates or both be datetimes")
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Interval start ({self.start}) must be before end ({self.end})"
            )

    def overlaps_with(self, other: 'Interval') -> bool:
        """
        Three-way overlap test

        The intervals overlap when this one starts during the other, ends
        during the other, or fully contains it. Adjacent intervals
        (self.end == other.start) do not overlap.

        Examples:
            - [25, 28) overlaps with [27, 30) -> True
            - [25, 28) overlaps with [28, 31) -> False (adjacent)
        """
        if not isinstance(other, Interval):
            raise TypeError("Can only check overlap with another Interval")

        starts_during = other.start <= self.start < other.end
        ends_during = other.start < self.end <= other.end
        contains = self.start <= other.start and other.end <= self.end
        return starts_during or ends_during or contains

    def covers(self, other: 'Interval') -> bool:
        """True when ``other`` lies completely inside this interval."""
        return self.start <= other.start and other.end <= self.end

    def contains(self, value: Bound, *, inclusive_end: bool = False) -> bool:
        """
        Check if a point is within this range

        start is inclusive; end is exclusive unless ``inclusive_end`` is set
        (calendar ranges are displayed with both days included).
        """
        if inclusive_end:
            return self.start <= value <= self.end
        return self.start <= value < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def days(self) -> int:
        """Whole days (nights for a stay) in the interval"""
        return self.duration.days

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"Interval({self.start!r}, {self.end!r})"
