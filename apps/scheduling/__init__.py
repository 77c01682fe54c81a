"""Scheduling app package.

Holds the availability engine shared by doctor appointments and cabin
reservations: interval overlap checks, allow-list availability periods
and free-range computation for calendars. The pure rules live in
``domain``; ``services`` binds them to concrete booking and period models.
"""
