"""Appointments app package.

Patients book doctors' time in their published availability periods and
pay for it in credits; doctors check patients in, write notes and complete
the consultation.
"""
