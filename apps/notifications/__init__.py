"""Notifications app package.

Turns appointment and cabin booking events into patient and doctor
messages. Delivery is switched off unless ``NOTIFICATIONS_ENABLED`` is set.
"""
