from django.db import models


class TimeStampedModel(models.Model):
    """Base abstraite: horodatage de creation / modification partage par les contenus."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
