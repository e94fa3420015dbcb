from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models

from common.models import TimeStampedModel

SHORT_DESC_LENGTH = 200


class Project(TimeStampedModel):
    class Category(models.TextChoices):
        EDUCATION = "EDUCATION", "Éducation"
        SOCIAL = "SOCIAL", "Social"
        HEALTH = "HEALTH", "Santé"
        DIGITAL = "DIGITAL", "Numérique"
        PARTNERSHIP = "PARTNERSHIP", "Partenariat"

    class Status(models.TextChoices):
        PLANNED = "PLANNED", "Planifié"
        IN_PROGRESS = "IN_PROGRESS", "En cours"
        COMPLETED = "COMPLETED", "Terminé"
        CANCELLED = "CANCELLED", "Annulé"

    title = models.CharField(max_length=200, unique=True)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField()
    short_desc = models.CharField(max_length=300, blank=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.SOCIAL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PLANNED)
    progress = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    image_url = models.URLField(max_length=500, blank=True)
    city = models.CharField(max_length=100, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_featured = models.BooleanField(default=False)
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="projects"
    )

    class Meta:
        verbose_name = "Projet"
        ordering = ["-is_featured", "-created_at"]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):
        if not self.short_desc and self.description:
            self.short_desc = self.description[:SHORT_DESC_LENGTH]
        super().save(*args, **kwargs)
