"""Message bus handlers that turn domain events into notifications."""

from __future__ import annotations

from apps.appointments.domain.events import (
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
)
from apps.cabins.domain.events import CabinBooked, CabinBookingCancelled
from apps.shop.domain.events import OrderCancelled, OrderPlaced
from apps.support.domain.events import PatientMessageAnswered
from shared.application.message_bus import MessageBus

from .services import send_notification


def on_appointment_booked(event: AppointmentBooked) -> None:
    payload = event.to_dict()
    send_notification("appointment_booked_patient", {**payload, "recipient_id": event.patient_id})
    send_notification("appointment_booked_doctor", {**payload, "recipient_id": event.doctor_id})


def on_appointment_cancelled(event: AppointmentCancelled) -> None:
    payload = event.to_dict()
    for recipient in (event.patient_id, event.doctor_id):
        send_notification("appointment_cancelled", {**payload, "recipient_id": recipient})


def on_appointment_completed(event: AppointmentCompleted) -> None:
    send_notification("appointment_completed", {**event.to_dict(), "recipient_id": event.patient_id})


def on_cabin_booked(event: CabinBooked) -> None:
    send_notification("cabin_booked", {**event.to_dict(), "recipient_id": event.patient_id})


def on_cabin_booking_cancelled(event: CabinBookingCancelled) -> None:
    send_notification("cabin_booking_cancelled", {**event.to_dict(), "recipient_id": event.patient_id})


def on_order_placed(event: OrderPlaced) -> None:
    send_notification("order_placed", {**event.to_dict(), "recipient_id": event.customer_id})


def on_order_cancelled(event: OrderCancelled) -> None:
    send_notification("order_cancelled", {**event.to_dict(), "recipient_id": event.customer_id})


def on_patient_message_answered(event: PatientMessageAnswered) -> None:
    send_notification("patient_message_answered", {**event.to_dict(), "recipient_id": event.patient_id})


def register(bus: MessageBus) -> None:
    bus.register_event_handler(AppointmentBooked, on_appointment_booked)
    bus.register_event_handler(AppointmentCancelled, on_appointment_cancelled)
    bus.register_event_handler(AppointmentCompleted, on_appointment_completed)
    bus.register_event_handler(CabinBooked, on_cabin_booked)
    bus.register_event_handler(CabinBookingCancelled, on_cabin_booking_cancelled)
    bus.register_event_handler(OrderPlaced, on_order_placed)
    bus.register_event_handler(OrderCancelled, on_order_cancelled)
    bus.register_event_handler(PatientMessageAnswered, on_patient_message_answered)
