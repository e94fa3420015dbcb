from django.utils import timezone
from rest_framework import serializers

from common.serializers import CamelModelSerializer, CamelSerializer
from common.utils import unique_slug
from .models import Document, DocumentTag, DocumentVersion

MAX_TAGS = 20


def _set_tags(document: Document, names) -> None:
    document.tags.all().delete()
    DocumentTag.objects.bulk_create([DocumentTag(document=document, name=n) for n in names])


class DocumentVersionSerializer(CamelModelSerializer):
    class Meta:
        model = DocumentVersion
        fields = ["id", "version", "file_url", "file_name", "file_size", "mime_type", "note", "created_at"]
        read_only_fields = fields


class DocumentSerializer(CamelModelSerializer):
    """Serializer d'administration (tags en liste de chaines)."""

    title = serializers.CharField(min_length=3, max_length=200)
    description = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, write_only=True, max_length=MAX_TAGS
    )

    class Meta:
        model = Document
        fields = [
            "id", "title", "slug", "description", "file_url", "file_name", "file_size", "mime_type",
            "category", "visibility", "can_download", "version", "downloads", "is_published",
            "published_at", "tags", "created_by", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "slug", "version", "downloads", "published_at", "created_by",
                            "created_at", "updated_at"]

    def validate_tags(self, value):
        seen = []
        for name in (v.strip() for v in value):
            if name and name not in seen:
                seen.append(name)
        return seen

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["tags"] = [t.name for t in instance.tags.all()]
        return data

    def create(self, validated_data):
        tags = validated_data.pop("tags", [])
        validated_data["slug"] = unique_slug(Document, validated_data["title"])
        if validated_data.get("is_published"):
            validated_data["published_at"] = timezone.now()
        document = super().create(validated_data)
        _set_tags(document, tags)
        DocumentVersion.objects.create(
            document=document,
            version=document.version,
            file_url=document.file_url,
            file_name=document.file_name,
            file_size=document.file_size,
            mime_type=document.mime_type,
            created_by=document.created_by,
        )
        return document

    def update(self, instance, validated_data):
        tags = validated_data.pop("tags", None)
        published = validated_data.get("is_published")
        if published is True and not instance.is_published:
            validated_data["published_at"] = timezone.now()
        elif published is False:
            validated_data["published_at"] = None
        document = super().update(instance, validated_data)
        if tags is not None:
            _set_tags(document, tags)
        return document


class DocumentPublishSerializer(CamelSerializer):
    is_published = serializers.BooleanField(required=False)


class NewVersionSerializer(CamelSerializer):
    file_url = serializers.URLField(max_length=500)
    file_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    file_size = serializers.IntegerField(min_value=0, required=False)
    mime_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    note = serializers.CharField(max_length=500, required=False, allow_blank=True)


class PublicDocumentSerializer(CamelModelSerializer):
    class Meta:
        model = Document
        fields = [
            "id", "title", "slug", "description", "file_url", "file_name", "file_size", "mime_type",
            "category", "visibility", "can_download", "version", "downloads", "published_at",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["tags"] = [t.name for t in instance.tags.all()]
        if not instance.can_download:
            data["fileUrl"] = None
        return data
