"""Notification collaborator."""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


# ============================================================================
# TEMPLATES
# ============================================================================

TEMPLATES: dict[str, str] = {
    "appointment_booked_patient": (
        "Your appointment #{appointment_id} is confirmed for {start_time}. "
        "{credits} credits were deducted."
    ),
    "appointment_booked_doctor": "New appointment #{appointment_id} booked for {start_time}.",
    "appointment_cancelled": (
        "Appointment #{appointment_id} was cancelled. {refunded_credits} credits were returned to the patient."
    ),
    "appointment_completed": "Appointment #{appointment_id} is complete. Thank you for using Careline.",
    "cabin_booked": "Cabin booking {booking_number} is confirmed from {check_in_date} to {check_out_date}.",
    "cabin_booking_cancelled": "Cabin booking {booking_number} was cancelled.",
    "order_placed": "Order {order_number} was placed. Total: {total_amount}.",
    "order_cancelled": "Order {order_number} was cancelled.",
    "patient_message_answered": "Support answered your message {message_number}: {subject}.",
}


def notifications_enabled() -> bool:
    return bool(getattr(settings, "NOTIFICATIONS_ENABLED", False))


def render(template_key: str, payload: dict[str, Any]) -> str:
    try:
        template = TEMPLATES[template_key]
    except KeyError as exc:
        raise ValueError(f"Unknown notification template {template_key}") from exc
    return template.format(**payload)


def send_notification(template_key: str, payload: dict[str, Any]) -> bool:
    """
    Format and deliver a notification.

    Returns ``False`` without delivering anything while notifications are
    disabled. The only channel is the application log.
    """
    message = render(template_key, payload)
    recipient = payload.get("recipient_id")

    if not notifications_enabled():
        logger.info(f"Notifications disabled, skipped {template_key} for user {recipient}")
        return False

    logger.info(f"Notification {template_key} to user {recipient}: {message}")
    return True
