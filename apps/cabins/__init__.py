"""Cabins app package: hospital rooms booked by the night."""
