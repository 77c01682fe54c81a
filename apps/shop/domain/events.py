"""
Pharmacy Order Domain Events
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class OrderPlaced(DomainEvent):
    """Event: A customer placed a medicine order"""
    order_id: Optional[int] = None
    order_number: str = ''
    customer_id: Optional[int] = None
    total_amount: Decimal = Decimal('0')


@dataclass
class OrderCancelled(DomainEvent):
    """Event: An order was cancelled and its stock returned"""
    order_id: Optional[int] = None
    order_number: str = ''
    customer_id: Optional[int] = None
    reason: str = ''
