"""
Cabin Booking Domain Events
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class CabinBooked(DomainEvent):
    """Event: A cabin was booked for a date range"""
    booking_id: Optional[int] = None
    booking_number: str = ''
    cabin_id: Optional[int] = None
    patient_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None


@dataclass
class CabinBookingCancelled(DomainEvent):
    """Event: A cabin booking was cancelled; its dates are free again"""
    booking_id: Optional[int] = None
    booking_number: str = ''
    cabin_id: Optional[int] = None
    patient_id: Optional[int] = None
    reason: str = ''
