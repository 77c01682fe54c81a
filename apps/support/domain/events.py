"""
Patient Support Domain Events
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class PatientMessageAnswered(DomainEvent):
    """Event: An admin answered a patient's message"""
    message_id: Optional[int] = None
    message_number: str = ''
    patient_id: Optional[int] = None
    subject: str = ''
