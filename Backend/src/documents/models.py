from django.conf import settings
from django.db import models

from common.models import TimeStampedModel
from users.models import Role
from users.permissions import has_required_role


class DocumentQuerySet(models.QuerySet):
    def visible_to(self, user):
        """Filtre par visibilite: anonyme -> PUBLIC, membre -> + MEMBERS_ONLY, admin -> tout."""
        role = getattr(user, "role", None) if user is not None and user.is_authenticated else None
        if has_required_role(role, Role.ADMIN):
            return self
        if has_required_role(role, Role.MEMBER):
            return self.filter(visibility__in=[Document.Visibility.PUBLIC, Document.Visibility.MEMBERS_ONLY])
        return self.filter(visibility=Document.Visibility.PUBLIC)


class Document(TimeStampedModel):
    class Category(models.TextChoices):
        STATUTS = "STATUTS", "Statuts"
        RAPPORT = "RAPPORT", "Rapport"
        GUIDE = "GUIDE", "Guide"
        LIVRE = "LIVRE", "Livre"
        ARTICLE = "ARTICLE", "Article"
        ACADEMIQUE = "ACADEMIQUE", "Académique"
        JURIDIQUE = "JURIDIQUE", "Juridique"
        ADMINISTRATIF = "ADMINISTRATIF", "Administratif"

    class Visibility(models.TextChoices):
        PUBLIC = "PUBLIC", "Public"
        MEMBERS_ONLY = "MEMBERS_ONLY", "Membres"
        ADMIN_ONLY = "ADMIN_ONLY", "Administrateurs"

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(max_length=2000, blank=True)
    file_url = models.URLField(max_length=500)
    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveBigIntegerField(default=0)
    mime_type = models.CharField(max_length=100, blank=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.RAPPORT)
    visibility = models.CharField(max_length=20, choices=Visibility.choices, default=Visibility.PUBLIC)
    can_download = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=1)
    downloads = models.PositiveIntegerField(default=0)
    is_published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="documents"
    )

    objects = DocumentQuerySet.as_manager()

    class Meta:
        verbose_name = "Document"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class DocumentTag(models.Model):
    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name="tags")
    name = models.CharField(max_length=50)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["document", "name"], name="unique_tag_per_document"),
        ]

    def __str__(self) -> str:
        return self.name


class DocumentVersion(models.Model):
    """Historique des fichiers d'un document (une ligne par version)."""

    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name="versions")
    version = models.PositiveIntegerField()
    file_url = models.URLField(max_length=500)
    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveBigIntegerField(default=0)
    mime_type = models.CharField(max_length=100, blank=True)
    note = models.CharField(max_length=500, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-version"]
        constraints = [
            models.UniqueConstraint(fields=["document", "version"], name="unique_document_version"),
        ]

    def __str__(self) -> str:
        return f"{self.document} v{self.version}"
