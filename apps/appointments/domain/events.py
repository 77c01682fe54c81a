"""
Appointment Domain Events

Published on the message bus after the booking transaction commits.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class AppointmentBooked(DomainEvent):
    """
    Event: A patient booked a doctor

    Triggers:
    - Notify the doctor and the patient
    """
    appointment_id: Optional[int] = None
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    credits: int = 0


@dataclass
class AppointmentCancelled(DomainEvent):
    """Event: An appointment was cancelled and its credits returned"""
    appointment_id: Optional[int] = None
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    cancelled_by: Optional[int] = None
    reason: str = ''
    refunded_credits: int = 0


@dataclass
class AppointmentCompleted(DomainEvent):
    """Event: The doctor completed the consultation"""
    appointment_id: Optional[int] = None
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
