"""Onboarding and doctor verification."""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction  # type: ignore

from shared.domain.exceptions import DomainValidationError

from .models import CustomUser

logger = logging.getLogger(__name__)

DOCTOR_PROFILE_FIELDS = ("specialty", "experience", "credential_url", "description")


@transaction.atomic
def onboard(user: CustomUser, role: str, profile: dict[str, Any] | None = None) -> CustomUser:
    """Assign PATIENT or DOCTOR to an account that has no role yet."""
    if user.role != CustomUser.Role.UNASSIGNED:
        raise DomainValidationError("Role has already been assigned.")

    if role == CustomUser.Role.PATIENT:
        user.role = CustomUser.Role.PATIENT
        user.save(update_fields=["role", "updated_at"])
    elif role == CustomUser.Role.DOCTOR:
        profile = profile or {}
        missing = [name for name in DOCTOR_PROFILE_FIELDS if not profile.get(name)]
        if missing:
            raise DomainValidationError(f"Doctor profile is incomplete: {', '.join(missing)}.")
        for name in DOCTOR_PROFILE_FIELDS:
            setattr(user, name, profile[name])
        user.role = CustomUser.Role.DOCTOR
        user.verification_status = CustomUser.VerificationStatus.PENDING
        user.save(update_fields=["role", "verification_status", *DOCTOR_PROFILE_FIELDS, "updated_at"])
    else:
        raise DomainValidationError("Role must be PATIENT or DOCTOR.")

    logger.info(f"User {user.pk} onboarded as {user.role}")
    return user


def set_verification_status(doctor: CustomUser, status: str) -> CustomUser:
    if not doctor.is_doctor():
        raise DomainValidationError("Only doctors can be verified.")
    if status not in CustomUser.VerificationStatus.values:
        raise DomainValidationError(f"Unknown verification status {status}.")
    doctor.verification_status = status
    doctor.save(update_fields=["verification_status", "updated_at"])
    logger.info(f"Doctor {doctor.pk} verification set to {status}")
    return doctor


def set_doctor_active(doctor: CustomUser, is_active: bool) -> CustomUser:
    """Suspend or reinstate a verified doctor."""
    if not doctor.is_doctor():
        raise DomainValidationError("Only doctors can be suspended or reinstated.")
    doctor.is_active = is_active
    doctor.save(update_fields=["is_active", "updated_at"])
    logger.info(f"Doctor {doctor.pk} active={is_active}")
    return doctor
