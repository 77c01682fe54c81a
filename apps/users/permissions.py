"""Role guards evaluated once per request by DRF."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

from .identity import resolve_identity
from .models import CustomUser


class HasRole(permissions.BasePermission):
    """
    Allow callers whose resolved role is in ``allowed_roles``.

    Administrators pass every role guard.
    """

    allowed_roles: tuple[str, ...] = ()
    message = "Your role does not allow this action."

    def has_permission(self, request, view) -> bool:  # type: ignore
        identity = resolve_identity(request.user)
        if not identity.is_authenticated:
            return False
        if identity.role == CustomUser.Role.ADMIN:
            return True
        return identity.has_role(*self.allowed_roles)


class IsPatient(HasRole):
    allowed_roles = (CustomUser.Role.PATIENT,)
    message = "Only patients can perform this action."


class IsDoctor(HasRole):
    allowed_roles = (CustomUser.Role.DOCTOR,)
    message = "Only doctors can perform this action."


class IsPatientOrDoctor(HasRole):
    allowed_roles = (CustomUser.Role.PATIENT, CustomUser.Role.DOCTOR)


class IsAdmin(HasRole):
    """Only administrators (role ADMIN or Django superusers)."""

    message = "Admin access required."


class IsVerifiedDoctor(permissions.BasePermission):
    message = "Only verified doctors can perform this action."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return user.is_admin() or user.is_verified_doctor()


class IsAdminOrReadOnly(permissions.BasePermission):
    """Anyone may read, administrators may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return IsAdmin().has_permission(request, view)
