"""User domain models for Careline.

One account model serves every role. Patients and doctors keep a cached
credit balance (the ledger in ``apps.ledger`` is authoritative); doctors
additionally carry the profile an administrator verifies before they can
receive appointments. ``external_id`` is the identifier issued by the
identity provider and is how incoming callers are matched to accounts.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CustomUserManager(BaseUserManager):
    """Manager that uses the email address as the login."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.Role.UNASSIGNED)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.Role.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def doctors(self):
        return self.filter(role=CustomUser.Role.DOCTOR)

    def verified_doctors(self):
        return self.doctors().filter(
            verification_status=CustomUser.VerificationStatus.VERIFIED,
            is_active=True,
        )


class CustomUser(AbstractUser):
    """Platform account with a role, a credit balance and a doctor profile."""

    class Role(models.TextChoices):
        UNASSIGNED = "UNASSIGNED", _("Unassigned")
        PATIENT = "PATIENT", _("Patient")
        DOCTOR = "DOCTOR", _("Doctor")
        ADMIN = "ADMIN", _("Administrator")

    class VerificationStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        VERIFIED = "VERIFIED", _("Verified")
        REJECTED = "REJECTED", _("Rejected")

    class Plan(models.TextChoices):
        FREE = "free_user", _("Free")
        STANDARD = "standard", _("Standard")
        PREMIUM = "premium", _("Premium")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
    )
    email = models.EmailField(_("Email"), unique=True)
    external_id = models.CharField(
        _("Identity provider ID"),
        max_length=128,
        unique=True,
        null=True,
        blank=True,
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=Role.choices,
        default=Role.UNASSIGNED,
    )
    credits = models.IntegerField(
        _("Credit balance"),
        default=0,
        help_text=_("Cached sum of the user's ledger entries."),
    )
    plan = models.CharField(
        _("Subscription plan"),
        max_length=20,
        choices=Plan.choices,
        blank=True,
    )

    # Doctor profile
    specialty = models.CharField(max_length=100, blank=True)
    experience = models.PositiveSmallIntegerField(null=True, blank=True)
    credential_url = models.URLField(blank=True)
    description = models.TextField(blank=True)
    verification_status = models.CharField(
        max_length=20,
        choices=VerificationStatus.choices,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role", "verification_status"]),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username or self.email

    def is_patient(self) -> bool:
        return self.role == self.Role.PATIENT

    def is_doctor(self) -> bool:
        return self.role == self.Role.DOCTOR

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_superuser

    def is_verified_doctor(self) -> bool:
        return (
            self.is_doctor()
            and self.is_active
            and self.verification_status == self.VerificationStatus.VERIFIED
        )


User = CustomUser
