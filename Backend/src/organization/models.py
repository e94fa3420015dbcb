from django.db import models

from common.models import TimeStampedModel


class Partner(TimeStampedModel):
    class Type(models.TextChoices):
        INSTITUTIONAL = "INSTITUTIONAL", "Institutionnel"
        PRIVATE = "PRIVATE", "Privé"

    name = models.CharField(max_length=100, unique=True)
    logo = models.URLField(max_length=500, blank=True)
    website = models.URLField(max_length=500, blank=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.INSTITUTIONAL)
    description = models.TextField(max_length=1000, blank=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Partenaire"
        ordering = ["order", "name"]

    def __str__(self) -> str:
        return self.name


class Antenne(TimeStampedModel):
    """Antenne locale de l'association (une par ville)."""

    city = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=150, blank=True)
    responsable = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(max_length=500, blank=True)

    class Meta:
        verbose_name = "Antenne"
        ordering = ["city"]

    def __str__(self) -> str:
        return self.name or f"Antenne de {self.city}"


class ExecutiveMember(TimeStampedModel):
    """Membre du bureau exécutif."""

    name = models.CharField(max_length=100)
    position = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    photo = models.URLField(max_length=500, blank=True)
    bio = models.TextField(max_length=1000, blank=True)
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Membre du bureau"
        verbose_name_plural = "Membres du bureau"
        ordering = ["order", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.position})"
