"""Pharmacy catalogue and order services.

Stock moves with the order: ``create_order`` takes it from every ordered
medicine under a row lock and both cancellation paths put it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from django.db import transaction  # type: ignore
from django.db.models import Count, F, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.scheduling.services import lock_queryset_if_possible
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DomainValidationError, NotFoundError, PermissionDeniedError

from .domain.events import OrderCancelled, OrderPlaced
from .models import Medicine, Order, OrderItem

logger = logging.getLogger(__name__)

# Admin status moves. Customers can only cancel, see ``cancel_order``.
STATUS_TRANSITIONS = {
    Order.Status.PENDING: {Order.Status.CONFIRMED, Order.Status.CANCELLED},
    Order.Status.CONFIRMED: {Order.Status.PROCESSING, Order.Status.CANCELLED},
    Order.Status.PROCESSING: {Order.Status.SHIPPED, Order.Status.CANCELLED},
    Order.Status.SHIPPED: {Order.Status.DELIVERED},
    Order.Status.DELIVERED: {Order.Status.REFUNDED},
    Order.Status.CANCELLED: {Order.Status.REFUNDED},
}


@dataclass
class ShippingDetails:
    shipping_address: str
    shipping_city: str
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    shipping_state: str = ""
    shipping_zip: str = ""
    shipping_country: str = "United States"
    payment_method: str = "CARD"
    notes: str = ""


@dataclass
class Charges:
    shipping_cost: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    discount_amount: Decimal = Decimal("0.00")


def generate_order_number() -> str:
    """ORD-<millisecond clock>-<nine random characters>."""
    millis = int(timezone.now().timestamp() * 1000)
    return f"ORD-{millis}-{uuid4().hex[:9].upper()}"


def _merge_lines(lines: Iterable[Tuple[int, int]]) -> dict[int, int]:
    merged: dict[int, int] = {}
    for medicine_id, quantity in lines:
        if quantity < 1:
            raise DomainValidationError("Quantity must be at least 1.")
        merged[medicine_id] = merged.get(medicine_id, 0) + quantity
    if not merged:
        raise DomainValidationError("An order needs at least one item.")
    return merged


def _load_order_for_update(order_id: int) -> Order:
    try:
        return lock_queryset_if_possible(Order.objects.filter(pk=order_id)).get()
    except Order.DoesNotExist as exc:
        raise NotFoundError("Order not found.") from exc


def _restock(order: Order) -> None:
    for item in order.items.all():
        Medicine.objects.filter(pk=item.medicine_id).update(stock=F("stock") + item.quantity)


def create_order(
    customer,
    lines: Sequence[Tuple[int, int]],
    details: ShippingDetails,
    charges: Optional[Charges] = None,
) -> Order:
    """
    Place an order for ``lines`` of ``(medicine_id, quantity)``.

    Prices come from the catalogue at the time of ordering. The ordered
    medicine rows are locked in primary key order, so concurrent orders for
    the same medicine cannot both take the last units.
    """
    charges = charges or Charges()
    wanted = _merge_lines(lines)
    for amount in (charges.shipping_cost, charges.tax_amount, charges.discount_amount):
        if amount < 0:
            raise DomainValidationError("Charges cannot be negative.")

    with DjangoUnitOfWork() as uow:
        medicines = {
            medicine.pk: medicine
            for medicine in lock_queryset_if_possible(
                Medicine.objects.filter(pk__in=list(wanted), is_active=True).order_by("pk")
            )
        }
        missing = [medicine_id for medicine_id in wanted if medicine_id not in medicines]
        if missing:
            raise NotFoundError(f"Medicine {missing[0]} not found.")

        subtotal = Decimal("0.00")
        for medicine_id, quantity in wanted.items():
            medicine = medicines[medicine_id]
            if medicine.stock < quantity:
                raise DomainValidationError(f"Only {medicine.stock} of {medicine.name} left in stock.")
            subtotal += medicine.price * quantity

        total = subtotal + charges.shipping_cost + charges.tax_amount - charges.discount_amount
        if total < 0:
            raise DomainValidationError("Discount cannot exceed the order total.")

        order = Order.objects.create(
            order_number=generate_order_number(),
            customer=customer,
            customer_name=details.customer_name or customer.display_name,
            customer_email=details.customer_email or customer.email,
            customer_phone=details.customer_phone,
            shipping_address=details.shipping_address,
            shipping_city=details.shipping_city,
            shipping_state=details.shipping_state,
            shipping_zip=details.shipping_zip,
            shipping_country=details.shipping_country or "United States",
            payment_method=details.payment_method or "CARD",
            notes=details.notes,
            subtotal=subtotal,
            shipping_cost=charges.shipping_cost,
            tax_amount=charges.tax_amount,
            discount_amount=charges.discount_amount,
            total_amount=total,
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                medicine=medicines[medicine_id],
                quantity=quantity,
                unit_price=medicines[medicine_id].price,
                total_price=medicines[medicine_id].price * quantity,
            )
            for medicine_id, quantity in wanted.items()
        ])
        for medicine_id, quantity in wanted.items():
            Medicine.objects.filter(pk=medicine_id).update(stock=F("stock") - quantity)

        uow.add_event(OrderPlaced(
            aggregate_id=order.pk,
            order_id=order.pk,
            order_number=order.order_number,
            customer_id=customer.pk,
            total_amount=total,
        ))

    logger.info(f"Order {order.order_number} placed by user {customer.pk}, total {total}")
    return order


def cancel_order(order_id: int, caller, reason: str = "") -> Order:
    """Cancel a PENDING or CONFIRMED order. Owners and admins only."""
    with DjangoUnitOfWork() as uow:
        order = _load_order_for_update(order_id)
        if not caller.is_admin() and order.customer_id != caller.pk:
            raise PermissionDeniedError("You can only cancel your own orders.")
        if not order.is_cancellable():
            raise DomainValidationError("Order cannot be cancelled at this stage.")

        order.status = Order.Status.CANCELLED
        order.cancelled_at = timezone.now()
        order.notes = f"Cancelled: {reason}" if reason else "Cancelled by user"
        order.save(update_fields=["status", "cancelled_at", "notes", "updated_at"])
        _restock(order)
        uow.add_event(OrderCancelled(
            aggregate_id=order.pk,
            order_id=order.pk,
            order_number=order.order_number,
            customer_id=order.customer_id,
            reason=reason,
        ))

    logger.info(f"Order {order.order_number} cancelled by {caller.pk}")
    return order


def update_order_status(order_id: int, new_status: str, notes: str = "") -> Order:
    """Admin console move along ``STATUS_TRANSITIONS``."""
    if new_status not in Order.Status.values:
        raise DomainValidationError(f"Unknown order status {new_status}.")

    with DjangoUnitOfWork() as uow:
        order = _load_order_for_update(order_id)
        allowed = STATUS_TRANSITIONS.get(order.status, set())
        if new_status not in allowed:
            raise DomainValidationError(f"Cannot change order status from {order.status} to {new_status}.")

        now = timezone.now()
        order.status = new_status
        if notes:
            order.notes = notes
        if new_status == Order.Status.CONFIRMED:
            order.payment_status = Order.PaymentStatus.PAID
            order.paid_at = order.paid_at or now
        elif new_status == Order.Status.DELIVERED:
            order.delivered_at = now
        elif new_status == Order.Status.REFUNDED:
            order.payment_status = Order.PaymentStatus.REFUNDED
        elif new_status == Order.Status.CANCELLED:
            order.cancelled_at = now
            _restock(order)
            uow.add_event(OrderCancelled(
                aggregate_id=order.pk,
                order_id=order.pk,
                order_number=order.order_number,
                customer_id=order.customer_id,
                reason=notes,
            ))
        order.save()

    logger.info(f"Order {order.order_number} moved to {new_status}")
    return order


def order_stats() -> dict[str, Any]:
    totals = Order.objects.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=Order.Status.PENDING)),
        processing=Count("id", filter=Q(status__in=[Order.Status.CONFIRMED, Order.Status.PROCESSING])),
        shipped=Count("id", filter=Q(status=Order.Status.SHIPPED)),
        delivered=Count("id", filter=Q(status=Order.Status.DELIVERED)),
        cancelled=Count("id", filter=Q(status=Order.Status.CANCELLED)),
        revenue=Sum("total_amount", filter=Q(payment_status=Order.PaymentStatus.PAID)),
    )
    totals["revenue"] = totals["revenue"] or Decimal("0")
    return totals


# --- catalogue ------------------------------------------------------------

def in_stock(queryset=None):
    """Active medicines that can still be ordered, newest first."""
    queryset = Medicine.objects.all() if queryset is None else queryset
    return queryset.filter(is_active=True, stock__gt=0)


@transaction.atomic
def delete_medicine(medicine: Medicine) -> None:
    """Delete a medicine, or hide it when past orders reference it."""
    if medicine.order_items.exists():
        medicine.is_active = False
        medicine.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Medicine {medicine.pk} deactivated")
        return
    medicine.delete()


def restock(medicine: Medicine, quantity: int) -> Medicine:
    if quantity < 1:
        raise DomainValidationError("Quantity must be at least 1.")
    Medicine.objects.filter(pk=medicine.pk).update(stock=F("stock") + quantity)
    medicine.refresh_from_db(fields=["stock"])
    logger.info(f"Medicine {medicine.pk} restocked by {quantity}")
    return medicine


def order_lines(items: List[dict]) -> List[Tuple[int, int]]:
    return [(item["medicine"], item["quantity"]) for item in items]
