from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class Role(models.TextChoices):
    """Roles ordonnes: MEMBER < ADMIN < SUPER_ADMIN (voir users.permissions)."""

    MEMBER = "MEMBER", "Membre"
    ADMIN = "ADMIN", "Administrateur"
    SUPER_ADMIN = "SUPER_ADMIN", "Super administrateur"


class User(AbstractUser):
    """
    Utilisateur de l'UESGM.

    - Hérite d'AbstractUser (username, email, first_name, last_name, is_staff, etc.)
    - ``role`` porte l'autorisation applicative ; ``is_staff`` en est déduit
      (accès à l'admin Django pour ADMIN et SUPER_ADMIN).
    - Verrouillage temporaire après trop d'échecs de connexion.
    """

    email = models.EmailField("adresse e-mail", unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    failed_login_attempts = models.PositiveSmallIntegerField(default=0)
    lockout_until = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        # Affiche le username si présent, sinon l'email
        return self.username or self.email

    def save(self, *args, **kwargs):
        if self.is_superuser:
            self.role = Role.SUPER_ADMIN
        self.is_staff = self.role in (Role.ADMIN, Role.SUPER_ADMIN)
        super().save(*args, **kwargs)

    def has_role(self, required: str) -> bool:
        from .permissions import has_required_role

        return has_required_role(self.role, required)

    @property
    def is_locked(self) -> bool:
        return bool(self.lockout_until and self.lockout_until > timezone.now())

    def register_failed_login(self) -> None:
        """Incremente le compteur ; verrouille le compte au-dela du seuil."""
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= settings.AUTH_MAX_FAILED_ATTEMPTS:
            self.lockout_until = timezone.now() + timedelta(minutes=settings.AUTH_LOCKOUT_MINUTES)
            self.failed_login_attempts = 0
        self.save(update_fields=["failed_login_attempts", "lockout_until", "is_staff", "role"])

    def reset_failed_logins(self) -> None:
        if self.failed_login_attempts or self.lockout_until:
            self.failed_login_attempts = 0
            self.lockout_until = None
            self.save(update_fields=["failed_login_attempts", "lockout_until", "is_staff", "role"])

    class Meta:
        verbose_name = "Utilisateur"
        verbose_name_plural = "Utilisateurs"
        ordering = ["id"]
