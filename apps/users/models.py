"""User domain models for StayHub.

There is a single account type: the same person books stays as a guest
and lists properties as a host. The ``admin`` role (or Django staff
flags) grants moderation rights over every booking and rating.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone format. Use the international format without spaces."),
)


def normalize_phone(phone: str | None) -> str | None:
    """Drop spaces, dashes and brackets; empty input means no phone."""
    if not phone:
        return None
    return "".join(ch for ch in phone if ch not in " -()")


class CustomUserManager(BaseUserManager):
    """Accounts are looked up and created by email address."""

    use_in_migrations = True

    def _build(self, email: str, password: str | None, extra: dict[str, Any]):
        if not email:
            raise ValueError("An email address is required to create a user.")
        extra["phone"] = normalize_phone(extra.get("phone"))
        user = self.model(email=self.normalize_email(email), **extra)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra = {"is_staff": False, "is_superuser": False, "role": CustomUser.RoleChoices.USER}
        extra.update(extra_fields)
        return self._build(email, password, extra)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra = {"is_staff": True, "is_superuser": True, "role": CustomUser.RoleChoices.ADMIN}
        extra.update(extra_fields)
        if not (extra["is_staff"] and extra["is_superuser"]):
            raise ValueError("A superuser needs both is_staff and is_superuser.")
        return self._build(email, password, extra)


class CustomUser(AbstractUser):
    """Marketplace account, guest and host at once."""

    class RoleChoices(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")

    username = models.CharField(_("Display name"), max_length=150, blank=True)
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.USER,
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

    def __str__(self) -> str:
        return self.email

    def is_platform_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN or self.is_staff or self.is_superuser


User = CustomUser
