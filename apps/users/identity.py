"""Identity collaborator: maps callers to internal accounts and roles."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.exceptions import NotFoundError

from .models import CustomUser


@dataclass(frozen=True)
class CallerIdentity:
    user_id: int | None
    role: str

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


ANONYMOUS = CallerIdentity(user_id=None, role=CustomUser.Role.UNASSIGNED)


def resolve_identity(user) -> CallerIdentity:
    """Resolve an authenticated request user to (id, role)."""
    if user is None or not getattr(user, "is_authenticated", False):
        return ANONYMOUS
    role = user.role
    if user.is_superuser:
        role = CustomUser.Role.ADMIN
    return CallerIdentity(user_id=user.pk, role=role)


def get_user_by_external_id(external_id: str) -> CustomUser:
    try:
        return CustomUser.objects.get(external_id=external_id)
    except CustomUser.DoesNotExist:
        raise NotFoundError(f"No account for identity {external_id}.")


def get_or_create_from_identity(external_id: str, email: str, **defaults) -> tuple[CustomUser, bool]:
    """First sign-in creates an UNASSIGNED account bound to the identity."""
    user = CustomUser.objects.filter(external_id=external_id).first()
    if user is not None:
        return user, False
    user = CustomUser.objects.create_user(email=email, external_id=external_id, **defaults)
    return user, True
